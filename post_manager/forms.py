"""
Form Classes for the Post API

Validation for JSON request bodies, built on Flask-WTF and WTForms. The
handlers feed the decoded body in as form data, one value per key, so a
field's ``raw_data`` is empty exactly when the key was absent from the request.

The forms include:
    - PostForm: for creating posts (title and content required)
    - PostUpdateForm: for partial updates (every field optional)
"""
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, TextAreaField, BooleanField
from wtforms.validators import DataRequired, Length, Optional, StopValidation, ValidationError

# JSON false and null both mean "not published"
FALSE_VALUES = (False, None)


def json_formdata(payload: dict) -> MultiDict:
    """Wrap each JSON value so lists stay a single value"""
    return MultiDict({key: [value] for key, value in payload.items()})


def to_text(value):
    """Coerce JSON numbers and booleans to text"""
    if value is None or isinstance(value, (str, list, dict)):
        return value
    return str(value)


def json_scalar(form, field):
    """Reject JSON arrays and objects for text fields"""
    if field.raw_data and isinstance(field.raw_data[0], (list, dict)):
        raise StopValidation(f'{field.label.text} must be a string.')


def json_boolean(form, field):
    """Accept only JSON true, false or null"""
    if field.raw_data and not isinstance(field.raw_data[0], (bool, type(None))):
        raise StopValidation(f'{field.label.text} must be true or false.')


def not_blank_if_present(form, field):
    """Reject an explicitly supplied empty value while allowing the key to be absent"""
    if field.raw_data and not (field.data or '').strip():
        raise ValidationError(f'{field.label.text} cannot be empty.')


class PostForm(FlaskForm):
    """Payload for POST /posts"""

    class Meta:
        csrf = False

    title = StringField('Title', filters=[to_text], validators=[json_scalar, DataRequired(), Length(max=255)])
    content = TextAreaField('Content', filters=[to_text], validators=[json_scalar, DataRequired()])
    author = StringField('Author', filters=[to_text], validators=[json_scalar, Optional(), Length(max=100)])
    published = BooleanField('Published', false_values=FALSE_VALUES, validators=[json_boolean])

    @classmethod
    def from_json(cls, payload: dict) -> 'PostForm':
        return cls(formdata=json_formdata(payload))

    def missing_required(self) -> bool:
        """True when title or content is absent or blank"""
        return any(
            not field.raw_data or field.raw_data[0] is None or
            (isinstance(field.data, str) and not field.data.strip())
            for field in (self.title, self.content)
        )

    def to_fields(self) -> dict:
        return {
            'title': self.title.data,
            'content': self.content.data,
            'author': self.author.data or None,
            'published': self.published.data,
        }


class PostUpdateForm(FlaskForm):
    """Payload for PUT /posts/<id>; absent keys are left untouched"""

    class Meta:
        csrf = False

    title = StringField('Title', filters=[to_text], validators=[json_scalar, not_blank_if_present, Length(max=255)])
    content = TextAreaField('Content', filters=[to_text], validators=[json_scalar, not_blank_if_present])
    author = StringField('Author', filters=[to_text], validators=[json_scalar, Optional(), Length(max=100)])
    published = BooleanField('Published', false_values=FALSE_VALUES, validators=[json_boolean])

    @classmethod
    def from_json(cls, payload: dict) -> 'PostUpdateForm':
        return cls(formdata=json_formdata(payload))

    def changes(self) -> dict:
        """Values for the keys present in the request body"""
        values = {name: field.data for name, field in self._fields.items() if field.raw_data}
        if 'author' in values:
            values['author'] = values['author'] or None
        return values
