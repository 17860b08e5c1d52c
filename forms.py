# Request records validated before dispatch
from typing import Annotated, ClassVar, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from errors import InvalidInput

USERNAME_MAX = 50
EMAIL_MAX = 100
TITLE_MAX = 200
ARTIST_MAX = 200
IMAGE_PATH_MAX = 255

# Error types that mean the field was absent, blank or not a string
MISSING_ERRORS = {'missing', 'string_type', 'string_too_short', 'model_type', 'model_attributes_type'}


def strip_text(value):
    return value.strip() if isinstance(value, str) else value


class Form(BaseModel):
    """Request body; validation errors surface as ``InvalidInput``."""

    required_message: ClassVar[str] = 'Invalid input.'

    @classmethod
    def from_json(cls, payload):
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidInput(cls.error_message(e.errors()))

    @classmethod
    def error_message(cls, errors):
        if any(error['type'] in MISSING_ERRORS for error in errors):
            return cls.required_message
        error = errors[0]
        field = error['loc'][0] if error['loc'] else 'input'
        if error['type'] == 'string_too_long':
            return f"{field} must be at most {error['ctx']['max_length']} characters."
        if field == 'email':
            return 'Invalid email format.'
        return f"Invalid {field}."


class RegisterForm(Form):
    required_message: ClassVar[str] = 'All fields are required.'

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX)
    email: EmailStr
    # Passwords are kept exactly as typed
    password: str = Field(..., min_length=1)

    @field_validator('username', 'email', mode='before')
    @classmethod
    def strip_whitespace(cls, value):
        return strip_text(value)

    @field_validator('email')
    @classmethod
    def email_fits_column(cls, value):
        if len(value) > EMAIL_MAX:
            raise PydanticCustomError(
                'string_too_long', 'String should have at most {max_length} characters',
                {'max_length': EMAIL_MAX})
        return value


class LoginForm(Form):
    required_message: ClassVar[str] = 'Username and password are required.'

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator('username', mode='before')
    @classmethod
    def strip_whitespace(cls, value):
        return strip_text(value)


class ContentForm(Form):
    required_message: ClassVar[str] = 'Title and content are required.'

    title: str = Field(..., min_length=1, max_length=TITLE_MAX)
    text: str = Field(..., min_length=1)
    image_path: Optional[Annotated[str, Field(max_length=IMAGE_PATH_MAX)]] = None
    artist_name: Optional[Annotated[str, Field(max_length=ARTIST_MAX)]] = None

    @field_validator('title', 'text', mode='before')
    @classmethod
    def strip_whitespace(cls, value):
        return strip_text(value)

    @field_validator('image_path', 'artist_name', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        return strip_text(value) or None


def search_term(args):
    term = (args.get('q') or '').strip()
    if not term:
        raise InvalidInput('Search term (q) is required.')
    return term
