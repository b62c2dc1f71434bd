"""
QueryService 단위 테스트

테스트 대상:
- list_posts(): 최신순 정렬, 카테고리 필터, 제목 검색
- get_post_by_slug() / get_post_by_id(): 상세 조회 형태
- list_categories() / get_category_by_slug(): 카테고리 조회
"""
import pytest

from blogdesk.errors import NotFound, ValidationError


class TestListPosts:
    """QueryService.list_posts() 테스트"""

    @pytest.mark.asyncio
    async def test_empty_store(self, queries):
        assert await queries.list_posts() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, mutations, queries):
        """createdAt 내림차순 정렬"""
        for title in ('First Post', 'Second Post', 'Third Post'):
            await mutations.create_post(title=title)

        posts = await queries.list_posts()

        assert [p.title for p in posts] == ['Third Post', 'Second Post', 'First Post']

    @pytest.mark.asyncio
    async def test_drafts_included(self, mutations, queries):
        """published 여부와 관계없이 모두 반환"""
        await mutations.create_post(title='Draft One', published=False)
        await mutations.create_post(title='Live One', published=True)

        posts = await queries.list_posts()

        assert {p.published for p in posts} == {True, False}

    @pytest.mark.asyncio
    async def test_category_filter(self, mutations, queries, categories):
        tech, life, _ = categories
        await mutations.create_post(title='Tech Only', category_ids=[tech.id])
        await mutations.create_post(title='Tech And Life', category_ids=[tech.id, life.id])
        await mutations.create_post(title='Unlinked')

        posts = await queries.list_posts(category_id=life.id)

        assert [p.title for p in posts] == ['Tech And Life']
        # 필터와 관계없이 게시물의 전체 카테고리를 포함
        assert sorted(c.name for c in posts[0].categories) == ['Life', 'Technology']

    @pytest.mark.asyncio
    async def test_categories_embedded(self, mutations, queries, categories):
        await mutations.create_post(title='Embedded', category_ids=[categories[2].id])

        post = (await queries.list_posts())[0]

        assert len(post.categories) == 1
        summary = post.categories[0]
        assert (summary.id, summary.name, summary.slug) == (categories[2].id, 'Travel', 'travel')

    @pytest.mark.asyncio
    async def test_search_case_insensitive(self, mutations, queries):
        await mutations.create_post(title='Learning Python')
        await mutations.create_post(title='Cooking Pasta')

        posts = await queries.list_posts(search_term='PYTHON')

        assert [p.title for p in posts] == ['Learning Python']

    @pytest.mark.asyncio
    async def test_search_substring(self, mutations, queries):
        await mutations.create_post(title='Hello World')

        assert len(await queries.list_posts(search_term='lo wo')) == 1

    @pytest.mark.asyncio
    async def test_empty_search_term_is_no_filter(self, mutations, queries):
        await mutations.create_post(title='Any Title')
        await mutations.create_post(title='Other Title')

        assert len(await queries.list_posts(search_term='')) == 2

    @pytest.mark.asyncio
    async def test_search_folds_non_ascii_case(self, mutations, queries):
        """ASCII 이외의 문자도 대소문자 구분 없이 검색"""
        await mutations.create_post(title='Über Café Guide')
        await mutations.create_post(title='Plain Title')

        for term in ('über', 'CAFÉ', 'üBER café'):
            posts = await queries.list_posts(search_term=term)
            assert [p.title for p in posts] == ['Über Café Guide'], term

    @pytest.mark.asyncio
    async def test_wildcards_match_literally(self, mutations, queries):
        """검색어의 %, _ 는 와일드카드가 아님"""
        await mutations.create_post(title='100% Pure')
        await mutations.create_post(title='1000 Pure')

        assert [p.title for p in await queries.list_posts(search_term='0%')] == ['100% Pure']
        assert await queries.list_posts(search_term='_') == []

    @pytest.mark.asyncio
    async def test_filter_and_search_combined(self, mutations, queries, categories):
        tech = categories[0]
        await mutations.create_post(title='Python Tips', category_ids=[tech.id])
        await mutations.create_post(title='Python Travel', category_ids=[categories[2].id])
        await mutations.create_post(title='Rust Tips', category_ids=[tech.id])

        posts = await queries.list_posts(category_id=tech.id, search_term='python')

        assert [p.title for p in posts] == ['Python Tips']

    @pytest.mark.asyncio
    async def test_no_match(self, mutations, queries, categories):
        await mutations.create_post(title='Something')

        assert await queries.list_posts(search_term='nothing here') == []
        assert await queries.list_posts(category_id=categories[0].id) == []

    @pytest.mark.asyncio
    async def test_unknown_category_is_empty(self, mutations, queries):
        await mutations.create_post(title='Lonely Post')

        assert await queries.list_posts(category_id=9999) == []


class TestGetPost:
    """get_post_by_slug() / get_post_by_id() 테스트"""

    @pytest.mark.asyncio
    async def test_get_by_slug(self, mutations, queries, sample_post, categories):
        created = await mutations.create_post(category_ids=[categories[0].id], **sample_post)

        post = await queries.get_post_by_slug('test-post-title')

        assert post.id == created.id
        assert post.content == sample_post['content']
        assert [c.slug for c in post.categories] == ['technology']

    @pytest.mark.asyncio
    async def test_get_by_slug_missing(self, queries):
        with pytest.raises(NotFound) as exc_info:
            await queries.get_post_by_slug('no-such-post')

        assert exc_info.value.http_status == 404

    @pytest.mark.asyncio
    async def test_get_by_id_edit_view(self, mutations, queries, categories):
        """편집 폼용 형태: content는 빈 문자열, categoryIds 목록"""
        created = await mutations.create_post(
            title='Edit Me', category_ids=[categories[1].id, categories[0].id]
        )

        view = await queries.get_post_by_id(created.id)

        assert view.id == created.id
        assert view.title == 'Edit Me'
        assert view.content == ''
        assert view.published is False
        assert sorted(view.category_ids) == sorted([categories[0].id, categories[1].id])

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, queries):
        with pytest.raises(NotFound):
            await queries.get_post_by_id(9999)


class TestCategoryQueries:
    """list_categories() / get_category_by_slug() 테스트"""

    @pytest.mark.asyncio
    async def test_ordered_by_name_desc(self, queries, categories):
        names = [c.name for c in await queries.list_categories()]

        assert names == ['Travel', 'Technology', 'Life']

    @pytest.mark.asyncio
    async def test_get_by_slug(self, queries, categories):
        category = await queries.get_category_by_slug('technology')

        assert category.id == categories[0].id
        assert category.description == 'Gadgets and code'

    @pytest.mark.asyncio
    async def test_get_by_slug_missing(self, queries):
        with pytest.raises(NotFound):
            await queries.get_category_by_slug('missing')

    @pytest.mark.asyncio
    async def test_counts(self, mutations, queries, categories):
        await mutations.create_post(title='Counted Post')

        assert await queries.count_posts() == 1
        assert await queries.count_categories() == len(categories)

    @pytest.mark.asyncio
    async def test_list_posts_rejects_bad_category_id(self, queries):
        with pytest.raises(ValidationError):
            await queries.list_posts(category_id='not-a-number')
