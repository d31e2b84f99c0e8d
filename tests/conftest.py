"""Fixtures for the contact function.

Environment is set before contact is imported: the module builds its store and
boto3 client at import time, the same way it does on a Lambda cold start.
"""

import base64
import json
import os

os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("CLUSTER_ARN", "arn:aws:rds:us-east-1:123456789012:cluster:contact-test")
os.environ.setdefault("SECRET_ARN", "arn:aws:secretsmanager:us-east-1:123456789012:secret:contact-test")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest

import contact
from store import ContactStore
from fake_data_api import FakeDataApi


@pytest.fixture
def data_api():
    return FakeDataApi()


@pytest.fixture
def store(data_api):
    return ContactStore(
        data_api,
        cluster_arn=os.environ["CLUSTER_ARN"],
        secret_arn=os.environ["SECRET_ARN"],
        database="contact",
    )


@pytest.fixture
def app(store, monkeypatch):
    """contact module wired to the in-memory store."""
    monkeypatch.setattr(contact, "STORE", store)
    monkeypatch.setattr(contact, "ALLOWED_STATUSES", set())
    return contact


@pytest.fixture
def call(app):
    """Invoke the Lambda handler with a REST API proxy event; returns (status, body, headers)."""

    def _call(method, path, body=None, headers=None, raw_body=None, base64_body=False):
        if raw_body is None and body is not None:
            raw_body = json.dumps(body)
        if base64_body and raw_body is not None:
            raw_body = base64.b64encode(raw_body.encode()).decode()
        event = {
            "httpMethod": method,
            "path": path,
            "headers": headers,
            "body": raw_body,
            "isBase64Encoded": base64_body,
        }
        resp = app.handler(event, None)
        payload = json.loads(resp["body"]) if resp["body"] else None
        return resp["statusCode"], payload, resp["headers"]

    return _call
