"""DynamoDB-backed append-only document collections."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import DocumentStoreError


class DynamoDBDocumentStore:
    """
    Append-only collections stored as DynamoDB tables.

    Each collection maps to the table ``<table_prefix><collection>``. Every
    insert gets a fresh UUID ``id`` and a ``createdAt`` timestamp assigned here
    at write time, so callers never supply their own creation time.
    """

    def __init__(self, dynamodb_resource: Any, table_prefix: str = ""):
        self._dynamodb = dynamodb_resource
        self._table_prefix = table_prefix
        self._tables: Dict[str, Any] = {}

    def table_name(self, collection: str) -> str:
        return f"{self._table_prefix}{collection}"

    def _table(self, collection: str) -> Any:
        if collection not in self._tables:
            self._tables[collection] = self._dynamodb.Table(self.table_name(collection))
        return self._tables[collection]

    def add(self, collection: str, document: Mapping[str, Any]) -> str:
        """
        Insert ``document`` into ``collection``.

        Returns:
            The generated document id

        Raises:
            DocumentStoreError: If DynamoDB rejects the write
        """
        document_id = str(uuid.uuid4())
        item = {
            **document,
            "id": document_id,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._table(collection).put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(id)",
            )
        except (ClientError, BotoCoreError) as exc:
            raise DocumentStoreError(
                f"Failed to add document to {self.table_name(collection)}: {exc}"
            ) from exc
        return document_id
