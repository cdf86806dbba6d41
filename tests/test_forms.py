from post_manager.forms import PostForm, PostUpdateForm


def test_post_form_accepts_minimal_payload(app):
    form = PostForm.from_json({'title': 'T', 'content': 'C'})

    assert form.validate()
    assert form.to_fields() == {'title': 'T', 'content': 'C', 'author': None, 'published': False}


def test_post_form_coerces_scalars_to_text(app):
    form = PostForm.from_json({'title': 42, 'content': 'C', 'published': True})

    assert form.validate()
    assert form.title.data == '42'
    assert form.published.data is True


def test_post_form_reports_missing_required(app):
    form = PostForm.from_json({'title': 'T'})

    assert not form.validate()
    assert form.missing_required()
    assert 'content' in form.errors


def test_post_form_empty_author_is_none(app):
    form = PostForm.from_json({'title': 'T', 'content': 'C', 'author': ''})

    assert form.validate()
    assert form.to_fields()['author'] is None


def test_update_form_only_reports_present_keys(app):
    form = PostUpdateForm.from_json({'content': 'New body'})

    assert form.validate()
    assert form.changes() == {'content': 'New body'}


def test_update_form_empty_body(app):
    form = PostUpdateForm.from_json({})

    assert form.validate()
    assert form.changes() == {}


def test_update_form_published_false_and_null(app):
    assert PostUpdateForm.from_json({'published': False}).changes() == {'published': False}
    assert PostUpdateForm.from_json({'published': None}).changes() == {'published': False}


def test_update_form_clears_author(app):
    form = PostUpdateForm.from_json({'author': ''})

    assert form.validate()
    assert form.changes() == {'author': None}


def test_update_form_rejects_blank_content(app):
    form = PostUpdateForm.from_json({'content': '  '})

    assert not form.validate()
    assert form.errors['content'] == ['Content cannot be empty.']


def test_update_form_rejects_null_title(app):
    form = PostUpdateForm.from_json({'title': None})

    assert not form.validate()
    assert 'title' in form.errors


def test_post_form_keeps_list_as_one_value(app):
    form = PostForm.from_json({'title': ['A', 'B'], 'content': 'C'})

    assert form.title.raw_data == [['A', 'B']]
    assert not form.validate()
    assert form.errors['title'] == ['Title must be a string.']
    assert not form.missing_required()


def test_post_form_rejects_object_content(app):
    form = PostForm.from_json({'title': 'T', 'content': {'x': 1}})

    assert not form.validate()
    assert form.errors['content'] == ['Content must be a string.']


def test_post_form_rejects_non_boolean_published(app):
    for value in ('no', 'true', 0, 1, ['x']):
        form = PostForm.from_json({'title': 'T', 'content': 'C', 'published': value})

        assert not form.validate()
        assert form.errors['published'] == ['Published must be true or false.']


def test_update_form_rejects_list_author(app):
    form = PostUpdateForm.from_json({'author': ['Ann', 'Bob']})

    assert not form.validate()
    assert 'author' in form.errors
