# blogdesk/models.py
# SQLAlchemy declaration of the blog schema, kept in step with the DDL in blogdesk.database.
from sqlalchemy import (
    Boolean, Column, ForeignKey, Integer, PrimaryKeyConstraint, String, Text, TIMESTAMP,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PostCategoryLink(Base):
    __tablename__ = 'posts_to_categories'
    __table_args__ = (PrimaryKeyConstraint('post_id', 'category_id'),)

    post_id = Column(Integer, ForeignKey('posts.id'), nullable=False)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=False, index=True)

    post = relationship("Post", back_populates="category_links")
    category = relationship("Category", back_populates="post_links")


class Post(Base):
    __tablename__ = 'posts'

    id = Column(Integer, primary_key=True)
    title = Column(String(256), nullable=False)
    slug = Column(String(256), nullable=False, unique=True)
    content = Column(Text, nullable=True)
    published = Column(Boolean, nullable=False, default=False, server_default='0')
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    category_links = relationship("PostCategoryLink", back_populates="post")


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True)
    name = Column(String(256), nullable=False, unique=True)
    slug = Column(String(256), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    post_links = relationship("PostCategoryLink", back_populates="category")
