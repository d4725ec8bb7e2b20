import pytest

from recordform.config import config_scope, resolve_config
from recordform.core.exceptions import RecordFormError
from recordform.forms.state import FormState
from recordform.http.form_data import Attachment
from recordform.notifications import LoggingNotifier
from recordform.session import PROFILE_ERROR_MESSAGES, build_profile_form, create_session

pytestmark = pytest.mark.unit


def test_profile_form_shape_and_validators():
    form = build_profile_form()
    assert list(form.value) == ["name", "email", "address", "avatar"]
    assert form.get("name").errors == {"required": True}
    assert form.get("avatar").errors is None
    form.set_value("email", "nope")
    assert form.get("email").errors == {"email": True}


@pytest.mark.asyncio
async def test_create_session_wires_defaults():
    session = create_session()
    try:
        assert session.service.record_url == "http://localhost:3000/users/1"
        assert isinstance(session.notifier, LoggingNotifier)
        assert session.error_messages is PROFILE_ERROR_MESSAGES
        assert session.load_lifecycle.name == "load"
        assert session.save_lifecycle.name == "save"
        assert not session.is_loading and not session.is_saving
    finally:
        await session.aclose()
    assert session._backend._client.is_closed


@pytest.mark.asyncio
async def test_create_session_uses_ambient_config(notifier):
    with config_scope(resolve_config({"record_id": 9})):
        session = create_session(notifier=notifier)
    async with session:
        assert session.service.record_url.endswith("/users/9")
        assert session.notifier is notifier


@pytest.mark.asyncio
async def test_save_refused_while_saving(notifier):
    async with create_session(notifier=notifier) as session:
        session.save_lifecycle.state.is_in_progress = True
        assert session.save_disabled
        assert session.reset_disabled
        with pytest.raises(RecordFormError, match="already in progress"):
            await session.save()


@pytest.mark.asyncio
async def test_select_attachment_requires_attachment_field(notifier):
    form = FormState.build(name="Ada")
    async with create_session(
        notifier=notifier, form=form, attachment_field=None
    ) as session:
        with pytest.raises(RecordFormError, match="no attachment field"):
            session.select_attachment(Attachment("a.png", b"x"))


@pytest.mark.asyncio
async def test_field_errors_use_profile_messages(notifier):
    async with create_session(notifier=notifier) as session:
        assert session.field_errors == {
            "name": "Please fill in the name",
            "email": "Please fill in the email",
            "address": "Please fill in the address",
        }
