"""
blog-service 단위 테스트를 위한 pytest fixtures
"""
import os
import sys
import pytest
import pytest_asyncio
import tempfile

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blogdesk.config import DatabaseConfig
from blogdesk.database import BlogDatabase
from blogdesk.services import MutationService, QueryService


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """테스트 환경 설정 (SQLite 사용)"""
    os.environ['USE_POSTGRES'] = 'false'
    os.environ['ALLOWED_ORIGINS'] = 'http://localhost:3000'
    yield


@pytest.fixture
def temp_db_path():
    """테스트용 임시 SQLite 데이터베이스 경로"""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, 'test_blog.db')
        os.environ['BLOG_DATABASE_PATH'] = db_path
        yield db_path


@pytest_asyncio.fixture
async def db(temp_db_path):
    """스키마가 초기화된 BlogDatabase"""
    database = BlogDatabase(DatabaseConfig())
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def mutations(db):
    return MutationService(db)


@pytest.fixture
def queries(db):
    return QueryService(db)


@pytest.fixture
def sample_post():
    """테스트용 게시물 데이터"""
    return {
        'title': 'Test Post Title',
        'content': 'This is the **content** of the test post.',
        'published': True,
    }


@pytest.fixture
def sample_categories():
    """테스트용 카테고리 데이터"""
    return [
        {'name': 'Technology', 'description': 'Gadgets and code'},
        {'name': 'Life', 'description': None},
        {'name': 'Travel', 'description': 'Places'},
    ]


@pytest_asyncio.fixture
async def categories(mutations, sample_categories):
    """미리 생성된 카테고리 목록"""
    return [await mutations.create_category(**data) for data in sample_categories]
