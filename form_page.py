"""
Contact form page: field values, local validation, the single POST to the
API and the rendered outcome.

The page moves through an explicit state machine:

    IDLE / SUCCESS / FAILED -> VALIDATING -> IDLE (local errors)
                                          -> SUBMITTING -> SUCCESS | FAILED

Only one submission can be in flight; while SUBMITTING the submit control
is disabled and further submits are ignored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from schemas import FIELD_RULES, FIELDS, validate

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
CONTACT_ENDPOINT = "/api/contact"

SERVER_FALLBACK_MESSAGE = "サーバーでエラーが発生しました。"
NETWORK_ERROR_MESSAGE = "通信エラーが発生しました。時間をおいて再度お試しください。"

FIELD_LABELS = {
    "name": "お名前",
    "email": "メールアドレス",
    "message": "メッセージ",
}


class FormState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


_TRANSITIONS = {
    FormState.IDLE: {FormState.VALIDATING},
    FormState.SUCCESS: {FormState.VALIDATING},
    FormState.FAILED: {FormState.VALIDATING},
    FormState.VALIDATING: {FormState.IDLE, FormState.SUBMITTING},
    FormState.SUBMITTING: {FormState.SUCCESS, FormState.FAILED},
}


class InvalidTransition(RuntimeError):
    pass


@dataclass(frozen=True)
class Banner:
    success: bool
    message: str


def page_context(
    values: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, List[str]]] = None,
    banner: Optional[Banner] = None,
    submitting: bool = False,
    endpoint: str = CONTACT_ENDPOINT,
) -> Dict[str, Any]:
    """Template context for contact.html. With no arguments, the empty form."""
    return {
        "fields": [{"name": f, "label": FIELD_LABELS[f]} for f in FIELDS],
        "values": values or {f: "" for f in FIELDS},
        "errors": errors or {},
        "banner": banner,
        "submitting": submitting,
        "rules": FIELD_RULES,
        "endpoint": endpoint,
        "server_fallback": SERVER_FALLBACK_MESSAGE,
        "network_error": NETWORK_ERROR_MESSAGE,
    }


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


class ContactFormPage:
    def __init__(self, client: httpx.Client, endpoint: str = CONTACT_ENDPOINT):
        self.client = client
        self.endpoint = endpoint
        self.state = FormState.IDLE
        self.values: Dict[str, str] = {f: "" for f in FIELDS}
        self.errors: Dict[str, List[str]] = {}
        self.banner: Optional[Banner] = None

    @property
    def submit_disabled(self) -> bool:
        return self.state is FormState.SUBMITTING

    def _transition(self, target: FormState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        logger.debug("Contact form %s -> %s", self.state.value, target.value)
        self.state = target

    def edit(self, field: str, value: str) -> None:
        """Set a field value. The last outcome stays visible until the next submit."""
        if field not in self.values:
            raise KeyError(field)
        self.values[field] = value

    def submit(self) -> FormState:
        """Validate locally and, if that passes, POST the submission once."""
        if self.submit_disabled:
            return self.state

        self._transition(FormState.VALIDATING)
        self.banner = None
        self.errors = {}

        result = validate(self.values)
        if not result.ok:
            self.errors = result.errors
            self._transition(FormState.IDLE)
            return self.state

        self._transition(FormState.SUBMITTING)
        try:
            response = self.client.post(self.endpoint, json=result.submission.model_dump())
        except httpx.HTTPError as e:
            logger.warning("Contact submission failed in transport: %s", e)
            self._finish(False, NETWORK_ERROR_MESSAGE)
            return self.state
        except Exception:
            logger.exception("Contact submission request could not be sent")
            self._finish(False, NETWORK_ERROR_MESSAGE)
            return self.state

        payload = _response_json(response)
        message = payload.get("message") if isinstance(payload.get("message"), str) else None
        if response.is_success:
            self._finish(True, message or "")
            self.values = {f: "" for f in FIELDS}
        else:
            self.errors = _field_errors(payload)
            self._finish(False, message or SERVER_FALLBACK_MESSAGE)
        return self.state

    def _finish(self, success: bool, message: str) -> None:
        self._transition(FormState.SUCCESS if success else FormState.FAILED)
        self.banner = Banner(success=success, message=message)

    def template_context(self) -> Dict[str, Any]:
        return page_context(
            values=dict(self.values),
            errors=self.errors,
            banner=self.banner,
            submitting=self.submit_disabled,
            endpoint=self.endpoint,
        )

    def render(self) -> str:
        return _env.get_template("contact.html").render(**self.template_context())


def _response_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _field_errors(payload: Dict[str, Any]) -> Dict[str, List[str]]:
    """Per-field messages from a 400 body, limited to the form's own fields."""
    errors = payload.get("errors")
    if not isinstance(errors, dict):
        return {}
    return {
        f: [m for m in errors[f] if isinstance(m, str)]
        for f in FIELDS
        if isinstance(errors.get(f), list) and errors[f]
    }
