"""Web interface rendering the user board page."""

from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from typing import Dict, Tuple
from urllib.parse import parse_qs

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from .controller import ViewSyncController
from .models import User, ViewState
from .state import is_error_message

logger = logging.getLogger("userboard.web")

ENDPOINTS: Tuple[Tuple[str, str, str], ...] = (
    ("GET", "/", "Welcome message"),
    ("GET", "/api/health", "Health check"),
    ("GET", "/api/users", "Get all users"),
    ("POST", "/api/users", "Create new user"),
)

_STYLESHEET = """
body { font-family: system-ui, sans-serif; background: #f4f6fb; margin: 0; }
.container { max-width: 760px; margin: 0 auto; padding: 24px; }
.header { text-align: center; margin-bottom: 24px; }
.card { background: #fff; border-radius: 8px; padding: 20px; margin-bottom: 20px; }
.form-group { margin-bottom: 12px; }
.form-group label { display: block; font-weight: 600; margin-bottom: 4px; }
.form-group input { width: 100%; padding: 8px; box-sizing: border-box; }
.btn { padding: 8px 16px; border: 0; border-radius: 4px; background: #4f46e5; color: #fff; }
.btn[disabled] { opacity: 0.6; }
.status { margin-top: 12px; padding: 10px; border-radius: 4px; }
.status.error { background: #fde2e1; color: #8a1c1c; }
.status.success { background: #dcfce7; color: #14532d; }
.user-item { border-bottom: 1px solid #e5e7eb; padding: 8px 0; }
"""


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%d %b %Y %H:%M:%S %Z")


async def _parse_form(request: Request) -> Dict[str, str]:
    body_bytes = await request.body()
    content_type = request.headers.get("content-type", "")
    charset = "utf-8"
    if "charset=" in content_type:
        charset = content_type.split("charset=", 1)[1].split(";", 1)[0].strip() or "utf-8"
    try:
        decoded = body_bytes.decode(charset)
    except (LookupError, UnicodeDecodeError):
        decoded = body_bytes.decode("utf-8", errors="replace")
    data = parse_qs(decoded, keep_blank_values=True)
    return {key: values[0] for key, values in data.items() if values}


def _render_user(user: User) -> str:
    created = ""
    if user.created_at is not None:
        created = f"<p>Created: {html.escape(_format_datetime(user.created_at))}</p>"
    return (
        '<div class="user-item">'
        f"<h3>{html.escape(user.name)}</h3>"
        f"<p>{html.escape(user.email)}</p>"
        f"{created}"
        "</div>"
    )


def render_page(request: Request, state: ViewState, *, api_url: str, environment: str) -> str:
    """Produce the full HTML document for the current view state."""

    disabled = " disabled" if state.loading else ""
    draft = state.draft

    if state.message:
        status_class = "error" if is_error_message(state.message) else "success"
        message_html = f'<div class="status {status_class}">{html.escape(state.message)}</div>'
    else:
        message_html = ""

    if state.loading and not state.users:
        users_html = '<div class="loading">Loading users...</div>'
    else:
        users_html = '<div class="user-list">' + "".join(_render_user(user) for user in state.users) + "</div>"

    endpoints_html = "".join(
        f"<li><code>{method} {path}</code> - {html.escape(label)}</li>"
        for method, path, label in ENDPOINTS
    )

    body = f"""
<div class="container">
  <div class="header">
    <h1>User Board</h1>
    <p>Server-rendered view over the users service</p>
  </div>

  <div class="card">
    <h2>Backend Status</h2>
    <p id="backend-status">{html.escape(state.backend_status)}</p>
    <form method="post" action="{request.url_for('ui_check_health')}">
      <button type="submit" class="btn">Check Health</button>
    </form>
  </div>

  <div class="card">
    <h2>Add New User</h2>
    <form method="post" action="{request.url_for('ui_create_user')}">
      <div class="form-group">
        <label for="name">Name:</label>
        <input type="text" id="name" name="name" value="{html.escape(draft.name)}" placeholder="Enter user name" />
      </div>
      <div class="form-group">
        <label for="email">Email:</label>
        <input type="email" id="email" name="email" value="{html.escape(draft.email)}" placeholder="Enter user email" />
      </div>
      <button type="submit" class="btn"{disabled}>{'Adding...' if state.loading else 'Add User'}</button>
    </form>
  </div>

  <div class="card">
    <h2>Users List</h2>
    <form method="post" action="{request.url_for('ui_refresh_users')}">
      <button type="submit" class="btn"{disabled}>{'Loading...' if state.loading else 'Refresh Users'}</button>
    </form>
    {message_html}
    {users_html}
  </div>

  <div class="card">
    <h2>API Information</h2>
    <p><strong>Backend URL:</strong> {html.escape(api_url)}</p>
    <p><strong>Environment:</strong> {html.escape(environment)}</p>
    <h3>Available Endpoints:</h3>
    <ul>{endpoints_html}</ul>
  </div>
</div>
"""

    return (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        "  <head>\n"
        "    <meta charset=\"utf-8\" />\n"
        "    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "    <title>User Board</title>\n"
        f"    <style>{_STYLESHEET}</style>\n"
        "  </head>\n"
        "  <body>\n"
        f"{body}\n"
        "  </body>\n"
        "</html>"
    )


def register_ui_routes(app: FastAPI, controller: ViewSyncController) -> None:
    """Expose the HTML user board on the provided FastAPI app."""

    router = APIRouter(include_in_schema=False)

    def _back_home(request: Request) -> RedirectResponse:
        return RedirectResponse(request.url_for("ui_home"), status_code=status.HTTP_303_SEE_OTHER)

    @router.get("/", response_class=HTMLResponse, name="ui_home")
    async def homepage(request: Request):
        if not controller.activated:
            logger.info("Activating view against %s", controller.config.api_url)
            await controller.activate()
        markup = render_page(
            request,
            controller.state,
            api_url=controller.config.api_url,
            environment=controller.config.environment,
        )
        return HTMLResponse(markup)

    @router.post("/users", name="ui_create_user")
    async def create_user(request: Request):
        form = await _parse_form(request)
        controller.update_draft(name=form.get("name", ""), email=form.get("email", ""))
        await controller.create_user()
        return _back_home(request)

    @router.post("/refresh", name="ui_refresh_users")
    async def refresh_users(request: Request):
        await controller.list_users()
        return _back_home(request)

    @router.post("/health", name="ui_check_health")
    async def check_health(request: Request):
        await controller.check_health()
        return _back_home(request)

    app.include_router(router)


__all__ = ["register_ui_routes", "render_page"]
