"""Thin async client for the Airtable REST API (one base, one table)"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class AirtableClient:
    """Create, query and patch records in a single Airtable table"""

    def __init__(self, config: dict, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = config["airtable_api_key"]
        self.base_id = config["airtable_base_id"]
        self.table_name = config["airtable_table_name"]
        self.timeout = config.get("http_timeout_seconds", 10.0)
        self.table_url = (
            f"{config['airtable_api_url'].rstrip('/')}/{self.base_id}/{self.table_name}"
        )
        # Tests inject an httpx.MockTransport here
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    async def create_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a single record.

        Returns:
            The created Airtable record ({"id": ..., "fields": {...}})

        Raises:
            httpx.HTTPStatusError: If Airtable rejects the request
            httpx.RequestError: If Airtable is unreachable
        """
        async with self._client() as client:
            response = await client.post(
                self.table_url,
                headers=self._headers(),
                json={"records": [{"fields": fields}], "typecast": True},
            )
            if response.is_error:
                logger.error(
                    f"Airtable create failed: {response.status_code} - {response.text}"
                )
            response.raise_for_status()
            return response.json()["records"][0]

    async def find_records(
        self, formula: str, max_records: int = 2
    ) -> List[Dict[str, Any]]:
        """
        List records matching an Airtable formula.

        Raises:
            httpx.HTTPStatusError: If Airtable rejects the request
            httpx.RequestError: If Airtable is unreachable
        """
        async with self._client() as client:
            response = await client.get(
                self.table_url,
                headers=self._headers(),
                params={"filterByFormula": formula, "maxRecords": max_records},
            )
            if response.is_error:
                logger.error(
                    f"Airtable query failed: {response.status_code} - {response.text}"
                )
            response.raise_for_status()
            return response.json().get("records", [])

    async def update_record(
        self, record_id: str, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Patch the given fields on a record, leaving other fields untouched.

        Raises:
            httpx.HTTPStatusError: If Airtable rejects the request
            httpx.RequestError: If Airtable is unreachable
        """
        async with self._client() as client:
            response = await client.patch(
                f"{self.table_url}/{record_id}",
                headers=self._headers(),
                json={"fields": fields, "typecast": True},
            )
            if response.is_error:
                logger.error(
                    f"Airtable update of {record_id} failed: "
                    f"{response.status_code} - {response.text}"
                )
            response.raise_for_status()
            return response.json()
