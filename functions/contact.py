import os, re, json, base64, logging

import envelope
from errors import ContactError, NotFoundError, PersistenceError, RouteNotFoundError, ValidationError
from observability import setup_logging
from store import from_environment

setup_logging(os.environ.get("LOG_LEVEL", "INFO"), os.environ.get("LOG_FORMAT", "json"))
logger = logging.getLogger("contact")

STORE = from_environment()
ALLOWED_STATUSES = {s.strip() for s in os.environ.get("ALLOWED_STATUSES", "").split(",") if s.strip()}

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
REQUIRED_FIELDS = ("name", "email", "message")
# CF-Connecting-IP is only trustworthy behind Cloudflare; on a bare API Gateway the client sets it
IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For")

CONTACT_PATH = "/api/contact"
MESSAGES_PATH = "/api/contact/messages"


def _method(event):
    method = event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "").upper()


def _path(event):
    return event.get("path") or event.get("rawPath") or "/"


def _header(event, name):
    # API Gateway keeps the client's casing on REST events, lowercases on HTTP API events
    wanted = name.lower()
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == wanted and value:
            return value
    return None


def _json_body(event):
    raw = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body")
    return body


def _present(value):
    return isinstance(value, str) and value != ""


def submit_message(event):
    body = _json_body(event)
    if not all(_present(body.get(f)) for f in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields: name, email, message")
    if not EMAIL_RE.fullmatch(body["email"]):
        raise ValidationError("Invalid email address")

    phone = body.get("phone")
    client_ip = next((ip for ip in (_header(event, h) for h in IP_HEADERS) if ip), "unknown")
    try:
        message_id = STORE.insert_message(
            name=body["name"],
            email=body["email"],
            message=body["message"],
            phone=str(phone) if phone else None,
            ip_address=client_ip,
            user_agent=_header(event, "User-Agent") or "",
        )
    except PersistenceError as e:
        return envelope.failure(500, "Failed to process contact form", e.message)
    logger.info("contact message stored", extra={"message_id": message_id})
    return envelope.success(201, "Your message has been received. We will be in touch shortly.", {"id": message_id})


def list_messages(event):
    # auth for this route belongs to whatever fronts the API (authorizer, proxy)
    try:
        rows = STORE.list_recent()
    except PersistenceError as e:
        return envelope.failure(500, "Failed to retrieve messages", e.message)
    return envelope.success(200, "Messages retrieved", rows)


def update_message_status(event, message_id):
    body = _json_body(event)
    status = body.get("status")
    if not _present(status):
        raise ValidationError("Status field is required")
    if ALLOWED_STATUSES and status not in ALLOWED_STATUSES:
        raise ValidationError(f"Invalid status: {status}")

    try:
        changed = STORE.update_status(message_id, status)
    except PersistenceError as e:
        return envelope.failure(500, "Failed to update message", e.message)
    if changed == 0:
        raise NotFoundError("Message not found")
    logger.info("contact message status set to %s", status, extra={"message_id": message_id})
    return envelope.success(200, "Message status updated")


def route(method, path):
    if path == CONTACT_PATH and method == "POST":
        return submit_message
    if path == MESSAGES_PATH and method == "GET":
        return list_messages
    if path.startswith(CONTACT_PATH + "/") and method == "PUT":
        message_id = path.split("/")[-1]
        return lambda event: update_message_status(event, message_id)
    raise RouteNotFoundError()


def handler(event, context):
    method, path = _method(event), _path(event)
    log_extra = {"request_id": getattr(context, "aws_request_id", None), "method": method, "path": path}

    if method == "OPTIONS":
        return envelope.preflight()

    try:
        resp = route(method, path)(event)
    except ContactError as e:
        resp = envelope.failure(e.status_code, e.error, e.message)
    except Exception as e:
        logger.exception("unhandled error", extra=log_extra)
        resp = envelope.failure(500, "Internal Server Error", str(e))
    logger.info("%s %s -> %s", method, path, resp["statusCode"], extra={**log_extra, "status_code": resp["statusCode"]})
    return resp
