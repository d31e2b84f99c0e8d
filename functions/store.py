"""contact_messages access through the RDS Data API.

Each method issues exactly one parameterized statement. Faults raised by
botocore surface as PersistenceError carrying the original text.
"""

import os, json, logging, boto3
from botocore.exceptions import BotoCoreError, ClientError

from errors import PersistenceError

logger = logging.getLogger(__name__)

INSERT_SQL = """INSERT INTO contact_messages (name, email, phone, message, ip_address, user_agent, status)
VALUES (:name, :email, :phone, :message, :ip_address, :user_agent, 'new')
RETURNING id"""

LIST_SQL = """SELECT id, name, email, phone, message, created_at, status
FROM contact_messages
ORDER BY created_at DESC
LIMIT :limit"""

UPDATE_STATUS_SQL = "UPDATE contact_messages SET status = :status WHERE id = :id"

MAX_LIST_LIMIT = 100


def to_parameters(values):
    """Encode a mapping as Data API SqlParameters."""
    params = []
    for name, value in values.items():
        if value is None:
            field = {"isNull": True}
        elif isinstance(value, bool):
            field = {"booleanValue": value}
        elif isinstance(value, int):
            field = {"longValue": value}
        else:
            field = {"stringValue": str(value)}
        params.append({"name": name, "value": field})
    return params


class ContactStore:
    def __init__(self, client, cluster_arn, secret_arn, database, list_limit=MAX_LIST_LIMIT):
        self.client = client
        self.cluster_arn = cluster_arn
        self.secret_arn = secret_arn
        self.database = database
        self.list_limit = max(1, min(int(list_limit), MAX_LIST_LIMIT))

    def _execute(self, sql, values, records=False):
        kwargs = {
            "resourceArn": self.cluster_arn,
            "secretArn": self.secret_arn,
            "database": self.database,
            "sql": sql,
            "parameters": to_parameters(values),
        }
        if records:
            kwargs["formatRecordsAs"] = "JSON"
        try:
            return self.client.execute_statement(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error("Data API statement failed: %s", e)
            raise PersistenceError(message=str(e)) from e

    @staticmethod
    def _records(resp):
        return json.loads(resp.get("formattedRecords") or "[]")

    def insert_message(self, name, email, message, phone=None, ip_address="unknown", user_agent=""):
        """Insert a new message with status 'new' and return its generated id."""
        resp = self._execute(INSERT_SQL, {
            "name": name,
            "email": email,
            "phone": phone,
            "message": message,
            "ip_address": ip_address,
            "user_agent": user_agent,
        }, records=True)
        rows = self._records(resp)
        if not rows or not rows[0].get("id"):
            raise PersistenceError(message="insert returned no id")
        return str(rows[0]["id"])

    def list_recent(self):
        resp = self._execute(LIST_SQL, {"limit": self.list_limit}, records=True)
        return self._records(resp)

    def update_status(self, message_id, status):
        """Set status on one row; returns the number of rows changed."""
        resp = self._execute(UPDATE_STATUS_SQL, {"status": status, "id": message_id})
        return resp.get("numberOfRecordsUpdated", 0)


def _list_limit(raw):
    """LIST_LIMIT can only lower the cap; unparsable values fall back to it."""
    if not raw:
        return MAX_LIST_LIMIT
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring non-integer LIST_LIMIT %r", raw)
        return MAX_LIST_LIMIT


def from_environment(client=None):
    return ContactStore(
        client or boto3.client("rds-data"),
        cluster_arn=os.environ["CLUSTER_ARN"],
        secret_arn=os.environ["SECRET_ARN"],
        database=os.environ.get("DATABASE_NAME", "contact"),
        list_limit=_list_limit(os.environ.get("LIST_LIMIT")),
    )
