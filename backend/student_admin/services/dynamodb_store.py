"""
Stockage des fiches élèves dans une table DynamoDB (clé de partition : id).

Utilise le client bas niveau boto3 (thread-safe) avec TypeSerializer / TypeDeserializer
pour convertir les items.
"""

import logging
from typing import Any, Dict, List

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from student_admin.config import Settings
from student_admin.exceptions import RecordStoreError
from student_admin.schemas.student import StudentRecord
from student_admin.services.record_store import RecordStore, check_patch

logger = logging.getLogger(__name__)


class DynamoRecordStore(RecordStore):

    def __init__(self, client, table_name: str):
        self.client = client
        self.table_name = table_name
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DynamoRecordStore":
        client = boto3.client(
            "dynamodb",
            aws_access_key_id=settings.ACCESS_KEY,
            aws_secret_access_key=settings.SECRET_ACCESS_KEY,
            region_name=settings.REGION,
            config=Config(
                connect_timeout=settings.AWS_CONNECT_TIMEOUT,
                read_timeout=settings.AWS_READ_TIMEOUT,
                retries={"max_attempts": settings.AWS_MAX_ATTEMPTS},
            ),
        )
        return cls(client, settings.DYNAMODB_NAME)

    # --- Conversion des items ---

    def _serialize(self, values: Dict[str, Any]) -> Dict[str, dict]:
        return {k: self._serializer.serialize(v) for k, v in values.items()}

    def _to_record(self, item: Dict[str, dict]) -> StudentRecord:
        return StudentRecord.model_validate(
            {k: self._deserializer.deserialize(v) for k, v in item.items()}
        )

    async def _call(self, action: str, func, **kwargs):
        try:
            return await run_in_threadpool(func, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise RecordStoreError(f"DynamoDB {action} sur {self.table_name} : {exc}") from exc

    # --- Lectures ---

    def _scan_pages(self, **kwargs) -> List[dict]:
        """Enchaîne les pages de Scan jusqu'à ce que LastEvaluatedKey disparaisse."""
        items: List[dict] = []
        while True:
            response = self.client.scan(TableName=self.table_name, **kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def scan_all(self) -> List[StudentRecord]:
        items = await self._call("scan", self._scan_pages)
        return [self._to_record(item) for item in items]

    async def scan_where(self, attribute: str, value: Any) -> List[StudentRecord]:
        # Filtre d'égalité évalué après lecture : coût proportionnel à la taille de la table
        items = await self._call(
            "scan",
            self._scan_pages,
            FilterExpression="#attr = :value",
            ExpressionAttributeNames={"#attr": attribute},
            ExpressionAttributeValues={":value": self._serializer.serialize(value)},
        )
        return [self._to_record(item) for item in items]

    # --- Écritures ---

    async def put(self, record: StudentRecord) -> None:
        await self._call(
            "put_item",
            self.client.put_item,
            TableName=self.table_name,
            Item=self._serialize(record.to_item()),
        )
        logger.info("Élève %s enregistré dans %s", record.id, self.table_name)

    def build_update(self, patch: Dict[str, Any]) -> dict:
        """
        Construit UpdateExpression / ExpressionAttributeNames / ExpressionAttributeValues.
        Chaque attribut passe par un alias (#a0, #a1...) : les mots réservés comme `name` sont couverts.
        """
        check_patch(patch)
        names: Dict[str, str] = {}
        values: Dict[str, dict] = {}
        assignments = []
        for index, (attribute, value) in enumerate(patch.items()):
            names[f"#a{index}"] = attribute
            values[f":v{index}"] = self._serializer.serialize(value)
            assignments.append(f"#a{index} = :v{index}")
        return {
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
        }

    async def update(self, record_id: str, patch: Dict[str, Any]) -> StudentRecord:
        response = await self._call(
            "update_item",
            self.client.update_item,
            TableName=self.table_name,
            Key={"id": self._serializer.serialize(record_id)},
            ReturnValues="ALL_NEW",
            **self.build_update(patch),
        )
        logger.info("Élève %s mis à jour (%s)", record_id, ", ".join(patch))
        return self._to_record(response["Attributes"])

    async def delete(self, record_id: str) -> None:
        await self._call(
            "delete_item",
            self.client.delete_item,
            TableName=self.table_name,
            Key={"id": self._serializer.serialize(record_id)},
        )
