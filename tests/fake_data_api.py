"""In-memory stand-in for the rds-data client, backed by sqlite3.

Speaks the execute_statement request/response shape the store relies on:
named SqlParameters in, numberOfRecordsUpdated / formattedRecords out.
"""

import json
import sqlite3

from botocore.exceptions import ClientError

SCHEMA = """
CREATE TABLE contact_messages (
  id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
  name TEXT NOT NULL,
  email TEXT NOT NULL,
  phone TEXT,
  message TEXT NOT NULL,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  status TEXT DEFAULT 'new',
  ip_address TEXT,
  user_agent TEXT
);
"""


def _decode(field):
    if field.get("isNull"):
        return None
    for key in ("stringValue", "longValue", "booleanValue", "doubleValue"):
        if key in field:
            return field[key]
    raise ValueError(f"unsupported parameter {field}")


class FakeDataApi:
    def __init__(self):
        self.conn = sqlite3.connect(":memory:")
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA)
        self.calls = []
        self.error = None

    def fail_with(self, message, code="BadRequestException"):
        self.error = ClientError({"Error": {"Code": code, "Message": message}}, "ExecuteStatement")

    def execute_statement(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        params = {p["name"]: _decode(p["value"]) for p in kwargs.get("parameters", [])}
        cur = self.conn.execute(kwargs["sql"], params)
        resp = {}
        if cur.description is not None:
            rows = [dict(r) for r in cur.fetchall()]
            resp["numberOfRecordsUpdated"] = 0 if kwargs["sql"].lstrip().upper().startswith("SELECT") else len(rows)
            if kwargs.get("formatRecordsAs") == "JSON":
                resp["formattedRecords"] = json.dumps(rows)
        else:
            resp["numberOfRecordsUpdated"] = cur.rowcount
        self.conn.commit()
        return resp

    def rows(self):
        return [dict(r) for r in self.conn.execute("SELECT * FROM contact_messages")]

    def seed(self, created_at, status="new", **fields):
        values = {"name": "Seed", "email": "seed@example.com", "message": "seeded", **fields}
        cur = self.conn.execute(
            "INSERT INTO contact_messages (name, email, message, created_at, status) "
            "VALUES (:name, :email, :message, :created_at, :status) RETURNING id",
            {**values, "created_at": created_at, "status": status},
        )
        message_id = cur.fetchall()[0]["id"]
        self.conn.commit()
        return message_id
