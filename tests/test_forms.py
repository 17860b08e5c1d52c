import pytest

from errors import InvalidInput
from forms import ContentForm, LoginForm, RegisterForm, search_term


def test_register_form_requires_every_field():
    with pytest.raises(InvalidInput) as excinfo:
        RegisterForm.from_json({"username": "alice", "email": "alice@example.com"})
    assert excinfo.value.message == "All fields are required."


def test_register_form_strips_username_but_not_password():
    form = RegisterForm.from_json({"username": " alice ", "email": "alice@example.com", "password": " pw "})

    assert form.username == "alice"
    assert form.password == " pw "


def test_register_form_rejects_bad_email():
    with pytest.raises(InvalidInput) as excinfo:
        RegisterForm.from_json({"username": "alice", "email": "not-an-email", "password": "pw"})
    assert excinfo.value.message == "Invalid email format."


@pytest.mark.parametrize("payload,message", [
    ({"username": "u" * 51, "email": "alice@example.com", "password": "pw"},
     "username must be at most 50 characters."),
    ({"username": "alice", "email": "a" * 60 + "@" + "b" * 45 + ".com", "password": "pw"},
     "email must be at most 100 characters."),
])
def test_register_form_enforces_column_lengths(payload, message):
    with pytest.raises(InvalidInput) as excinfo:
        RegisterForm.from_json(payload)
    assert excinfo.value.message == message


def test_login_form_ignores_non_object_payload():
    with pytest.raises(InvalidInput) as excinfo:
        LoginForm.from_json(["alice", "pw"])
    assert excinfo.value.message == "Username and password are required."


def test_login_form_rejects_non_string_password():
    with pytest.raises(InvalidInput) as excinfo:
        LoginForm.from_json({"username": "alice", "password": 1234})
    assert excinfo.value.message == "Username and password are required."


def test_content_form_accepts_optional_fields():
    form = ContentForm.from_json({
        "title": " Demo ",
        "text": "body",
        "image_path": "/uploads/1-a.png",
        "artist_name": "Tool",
    })

    assert form.title == "Demo"
    assert form.image_path == "/uploads/1-a.png"
    assert form.artist_name == "Tool"


def test_content_form_blank_optional_fields_become_none():
    form = ContentForm.from_json({"title": "Demo", "text": "body", "artist_name": "  "})
    assert form.artist_name is None
    assert form.image_path is None


def test_content_form_requires_title_and_text():
    with pytest.raises(InvalidInput) as excinfo:
        ContentForm.from_json({"title": "   ", "text": "body"})
    assert excinfo.value.message == "Title and content are required."


def test_content_form_limits_title_length():
    with pytest.raises(InvalidInput) as excinfo:
        ContentForm.from_json({"title": "t" * 201, "text": "body"})
    assert excinfo.value.message == "title must be at most 200 characters."


def test_search_term_is_required():
    assert search_term({"q": " tom "}) == "tom"
    with pytest.raises(InvalidInput):
        search_term({})
