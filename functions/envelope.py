import json

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Content-Type": "application/json",
}


def respond(status, payload=None):
    return {
        "statusCode": status,
        "headers": dict(CORS_HEADERS),
        "body": "" if payload is None else json.dumps(payload, default=str),
    }


def preflight():
    return respond(204)


def success(status, message, data=None):
    payload = {"success": True, "message": message}
    if data is not None:
        payload["data"] = data
    return respond(status, payload)


def failure(status, error, message=None):
    payload = {"success": False, "error": error}
    if message is not None:
        payload["message"] = message
    return respond(status, payload)
