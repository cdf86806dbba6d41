import uuid

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from post_manager.services import PostService

MISSING_ID = '00000000-0000-7000-8000-000000000000'


def _fail_commit(*args, **kwargs):
    raise OperationalError('COMMIT', {}, Exception('disk I/O error'))


def test_post_lifecycle(client):
    response = client.post('/posts', json={'title': 'Hello', 'content': 'World'})
    assert response.status_code == 201
    created = response.get_json()
    assert created['title'] == 'Hello'
    assert created['content'] == 'World'
    assert created['author'] is None
    assert created['published'] is False
    assert created['createdAt'] == created['updatedAt']
    assert uuid.UUID(created['id']).version == 7

    response = client.get(f"/posts/{created['id']}")
    assert response.status_code == 200
    assert response.get_json() == created

    response = client.put(f"/posts/{created['id']}", json={'published': True})
    assert response.status_code == 200
    updated = response.get_json()
    assert updated['published'] is True
    assert updated['title'] == 'Hello'
    assert updated['createdAt'] == created['createdAt']
    assert updated['updatedAt'] >= created['updatedAt']

    response = client.delete(f"/posts/{created['id']}")
    assert response.status_code == 200
    assert response.get_json() == {'message': 'Post deleted successfully'}

    response = client.get(f"/posts/{created['id']}")
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Post not found'}


def test_list_posts_empty(client):
    response = client.get('/posts')

    assert response.status_code == 200
    assert response.get_json() == []


def test_list_posts_filter(client, make_post):
    make_post(title='draft')
    make_post(title='live', published=True)

    published = client.get('/posts?published=true').get_json()
    drafts = client.get('/posts?published=false').get_json()
    everything = client.get('/posts').get_json()

    assert [post['title'] for post in published] == ['live']
    assert [post['title'] for post in drafts] == ['draft']
    assert len(everything) == 2


def test_create_with_all_fields(client):
    response = client.post('/posts', json={
        'title': 'T', 'content': 'C', 'author': 'Ann', 'published': True,
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body['author'] == 'Ann'
    assert body['published'] is True


def test_create_treats_null_published_as_false(client):
    response = client.post('/posts', json={'title': 'T', 'content': 'C', 'published': None})

    assert response.status_code == 201
    assert response.get_json()['published'] is False


@pytest.mark.parametrize('payload', [
    {'content': 'C'},
    {'title': 'T'},
    {'title': '', 'content': 'C'},
    {'title': 'T', 'content': '   '},
])
def test_create_requires_title_and_content(client, payload):
    response = client.post('/posts', json=payload)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Title and content are required'
    assert client.get('/posts').get_json() == []


def test_create_rejects_overlong_title(client):
    response = client.post('/posts', json={'title': 'x' * 256, 'content': 'C'})

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Invalid post data'
    assert 'title' in body['errors']


@pytest.mark.parametrize('data', ['not json', '[1, 2]', '"text"'])
def test_create_rejects_non_object_body(client, data):
    response = client.post('/posts', data=data, content_type='application/json')

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Request body must be a JSON object'}


def test_get_malformed_id_is_not_found(client):
    response = client.get('/posts/not-a-uuid')

    assert response.status_code == 404
    assert response.get_json() == {'error': 'Post not found'}


def test_update_partial(client, make_post):
    post = make_post(title='Old', content='Body', author='Ann')

    response = client.put(f'/posts/{post.id}', json={'title': 'New'})

    assert response.status_code == 200
    body = response.get_json()
    assert body['title'] == 'New'
    assert body['content'] == 'Body'
    assert body['author'] == 'Ann'


def test_update_empty_body_changes_nothing_but_timestamp(client, make_post):
    post = make_post(title='Same')
    before = post.to_dict()

    response = client.put(f'/posts/{post.id}', json={})

    assert response.status_code == 200
    body = response.get_json()
    assert body['title'] == 'Same'
    assert body['updatedAt'] >= before['updatedAt']


def test_update_rejects_blank_title(client, make_post):
    post = make_post(title='Keep')

    response = client.put(f'/posts/{post.id}', json={'title': ''})

    assert response.status_code == 400
    assert 'title' in response.get_json()['errors']
    assert client.get(f'/posts/{post.id}').get_json()['title'] == 'Keep'


def test_update_missing_post(client):
    response = client.put(f'/posts/{MISSING_ID}', json={'title': 'x'})

    assert response.status_code == 404
    assert response.get_json() == {'error': 'Post not found'}


def test_delete_missing_post(client):
    response = client.delete(f'/posts/{MISSING_ID}')

    assert response.status_code == 404
    assert response.get_json() == {'error': 'Post not found'}


def test_create_database_failure(client, monkeypatch):
    monkeypatch.setattr(Session, 'commit', _fail_commit)

    response = client.post('/posts', json={'title': 'T', 'content': 'C'})

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to create post'}


def test_unhandled_error_returns_generic_500(app, client, monkeypatch):
    app.config['PROPAGATE_EXCEPTIONS'] = False

    def explode(self, published=None):
        raise RuntimeError('boom')

    monkeypatch.setattr(PostService, 'find_all', explode)

    response = client.get('/posts')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Internal server error'}


def test_method_not_allowed_is_json(client):
    response = client.patch('/posts')

    assert response.status_code == 405
    assert 'error' in response.get_json()


def test_unknown_route_is_json(client):
    response = client.get('/nothing-here')

    assert response.status_code == 404
    assert 'error' in response.get_json()


def test_create_rejects_array_and_object_values(client):
    response = client.post('/posts', json={'title': ['A', 'B'], 'content': {'x': 1}})

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Invalid post data'
    assert body['errors'] == {'title': ['Title must be a string.'], 'content': ['Content must be a string.']}
    assert client.get('/posts').get_json() == []


@pytest.mark.parametrize('value', ['no', 'false', 1])
def test_create_rejects_non_boolean_published(client, value):
    response = client.post('/posts', json={'title': 'T', 'content': 'C', 'published': value})

    assert response.status_code == 400
    assert 'published' in response.get_json()['errors']
    assert client.get('/posts').get_json() == []


def test_update_rejects_array_title(client, make_post):
    post = make_post(title='Keep')

    response = client.put(f'/posts/{post.id}', json={'title': ['A', 'B']})

    assert response.status_code == 400
    assert client.get(f'/posts/{post.id}').get_json()['title'] == 'Keep'


def _fail_query(*args, **kwargs):
    raise OperationalError('SELECT', {}, Exception('no such table: posts'))


def test_list_database_failure(client, monkeypatch):
    monkeypatch.setattr(Session, 'query', _fail_query)

    response = client.get('/posts')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to fetch posts'}


def test_get_database_failure(client, make_post, monkeypatch):
    post = make_post()
    monkeypatch.setattr(Session, 'get', _fail_query)

    response = client.get(f'/posts/{post.id}')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to fetch post'}


def test_update_database_failure(client, make_post, monkeypatch):
    post = make_post(title='Before')
    monkeypatch.setattr(Session, 'commit', _fail_commit)

    response = client.put(f'/posts/{post.id}', json={'title': 'After'})

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to update post'}
    monkeypatch.undo()
    assert client.get(f'/posts/{post.id}').get_json()['title'] == 'Before'


def test_delete_database_failure(client, make_post, monkeypatch):
    post = make_post()
    monkeypatch.setattr(Session, 'commit', _fail_commit)

    response = client.delete(f'/posts/{post.id}')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to delete post'}
    monkeypatch.undo()
    assert client.get(f'/posts/{post.id}').status_code == 200
