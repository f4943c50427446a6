"""HTTP surfaces for Sara: web chat, Messenger webhook and the demo map."""

from __future__ import annotations

from typing import Any

from fastapi import Body, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from app.chat_logic import IncomingMessage, handle_demo_map_chat, process_message
from src.sara.channels.messenger import parse_messaging_event, send_text_message, verify_subscription
from src.sara.core.config_loader import get_messenger_config, get_mode, is_demo
from src.sara.core.errors import AuthzError, ExpiredError, ModeError, NotFoundError, SaraError, ValidationError
from src.sara.core.logger import get_logger, setup_logging
from src.sara.core.message_store import get_messages_for_user
from src.sara.core.report_store import find_report_by_id, get_report_token
from src.sara.core.token_policy import is_expired
from src.sara.core.users import get_user_by_id, project_for_model
from src.sara.demo.demo_store import get_demo_report, get_session_token, list_all_demo_projects, list_all_demo_reports
from src.sara.demo.exports import (
    CITY_EXPORT_FILENAME,
    city_report_csv,
    report_download_body,
    report_download_filename,
)
from src.sara.demo.map_views import default_map_view, session_map_view
from src.sara.demo.roles import get_role_info
from src.sara.demo.seeding import seed_demo_data_if_needed
from src.sara.demo.sessions import resolve_session

log = get_logger("http")

app = FastAPI(title="Sara")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class WebChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId", min_length=1)
    text: str = Field(min_length=1)
    name: str | None = None


class DemoMapChatRequest(BaseModel):
    token: str = Field(min_length=1)
    text: str = Field(min_length=1)


@app.on_event("startup")
def _init_logging() -> None:
    setup_logging()
    log.info("sara starting in %s mode", get_mode())


@app.exception_handler(SaraError)
def _sara_error_handler(request: Request, exc: SaraError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=CORS_HEADERS)


@app.exception_handler(RequestValidationError)
def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()} - {""})
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message}, headers=CORS_HEADERS)


def _require_demo(message: str) -> None:
    if not is_demo():
        raise ModeError(message)
    seed_demo_data_if_needed("demo")


@app.get("/health")
def health() -> dict:
    return {"ok": True, "mode": get_mode()}


@app.options("/api/web-chat")
def web_chat_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/api/web-chat")
def web_chat(req: WebChatRequest) -> JSONResponse:
    result = process_message(
        IncomingMessage(
            sender_id=req.session_id,
            text=req.text,
            channel="web",
            name_hint=req.name,
        )
    )
    return JSONResponse(content=result, headers=CORS_HEADERS)


@app.get("/api/messenger-webhook")
def messenger_verify(
    hub_mode: str | None = Query(default=None, alias="hub.mode"),
    hub_verify_token: str | None = Query(default=None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(default=None, alias="hub.challenge"),
) -> PlainTextResponse:
    expected = get_messenger_config()["verify_token"]
    challenge = verify_subscription(hub_mode, hub_verify_token, hub_challenge, expected)
    if challenge is None:
        return PlainTextResponse("Verification failed", status_code=403)
    return PlainTextResponse(challenge)


@app.post("/api/messenger-webhook")
def messenger_webhook(payload: Any = Body(None)) -> PlainTextResponse:
    event = parse_messaging_event(payload)
    if event is None:
        return PlainTextResponse("No usable message")

    result = process_message(
        IncomingMessage(
            sender_id=event.sender_id,
            text=event.text,
            channel="messenger",
            timestamp=event.timestamp,
            media_urls=event.media_urls,
            raw_payload=payload,
        )
    )
    send_text_message(event.sender_id, result["replyText"])
    return PlainTextResponse("OK")


@app.get("/api/demo-map-session")
def demo_map_session(token: str | None = None) -> dict:
    _require_demo("Demo map session is only available in demo mode")
    reports = list_all_demo_reports()
    projects = list_all_demo_projects()
    if not token:
        return default_map_view(reports, projects)

    session = resolve_session(token)
    user = get_user_by_id(session.user_id)
    if user is None:
        raise NotFoundError("User not found for session")

    role_info = get_role_info(user.id)
    profile = project_for_model(user, [], role_info, mode="demo")
    return session_map_view(
        session,
        profile,
        reports,
        projects,
        get_messages_for_user(user.id),
        primary_report_id=role_info.primary_demo_report_id if role_info is not None else None,
    )


@app.options("/api/demo-map-chat")
def demo_map_chat_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/api/demo-map-chat")
def demo_map_chat(req: DemoMapChatRequest) -> JSONResponse:
    return JSONResponse(content=handle_demo_map_chat(req.token, req.text), headers=CORS_HEADERS)


@app.get("/api/demo-download-report")
def demo_download_report(token: str | None = None, report_id: str | None = Query(default=None, alias="reportId")) -> Response:
    _require_demo("Demo download is only available in demo mode")
    if not token or not report_id:
        raise ValidationError("token and reportId are required")

    resolve_session(token)
    report = get_demo_report(report_id)
    if report is None:
        raise NotFoundError("Report not found")

    return Response(
        content=report_download_body(report),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{report_download_filename(report.id)}"'},
    )


@app.get("/api/demo-export-city-report")
def demo_export_city_report(token: str | None = None) -> Response:
    _require_demo("Demo export is only available in demo mode")
    if not token:
        raise ValidationError("token is required")

    session = get_session_token(token)
    if session is None:
        raise NotFoundError("Session not found")
    # Role before expiry.
    if session.role != "city":
        raise AuthzError("Only the city demo role can export aggregated reports")
    if is_expired(session.expires_at):
        raise ExpiredError("Demo session expired")

    return Response(
        content=city_report_csv(list_all_demo_reports()),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CITY_EXPORT_FILENAME}"'},
    )


def _view_report(report_id: str, token: str | None) -> dict[str, Any]:
    if not token:
        raise ValidationError("token is required")
    link = get_report_token(report_id, token)
    if link is None:
        raise NotFoundError("Report link not found")
    if is_expired(link.expires_at):
        raise ExpiredError("Report link expired")
    report = find_report_by_id(report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return {"report": report.to_dict(), "expiresAt": link.expires_at}


@app.get("/report/{report_id}")
def view_report(report_id: str, token: str | None = None) -> dict:
    return _view_report(report_id, token)


@app.get("/demo-report/{report_id}")
def view_demo_report(report_id: str, token: str | None = None) -> dict:
    payload = _view_report(report_id, token)
    payload["demo"] = True
    return payload
