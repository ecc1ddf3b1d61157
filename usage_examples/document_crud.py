"""
Document CRUD Example

Walks through every document operation against the configured collection:
single and batch creates with JSON text, XML text, a dict and a pydantic
model, paged reads, replace by stored document, and deletes. The batches
include deliberately bad items to show per-item failures.

Set DOCDB_ENDPOINT and DOCDB_AUTH_KEY (or pass a YAML config path as the
first argument) before running.
"""

import sys
import os
import asyncio
import uuid

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pydantic import BaseModel

from client import DocDBClient
from config import ReturnShape, configure_logging, load_settings
from connection_management import ConnectionInitializationError
from document_operations import Comparator, FieldPredicate, StoredDocument
from usage_examples.utils import print_batch, print_envelope, print_error, print_section, print_step


class Customer(BaseModel):
    id: str
    name: str
    city: str


async def main():
    """Main function to demonstrate document operations."""
    print_section("Document CRUD Example")
    settings = load_settings(sys.argv[1] if len(sys.argv) > 1 else None)
    configure_logging(settings)
    run_id = uuid.uuid4().hex[:8]

    async with DocDBClient(settings) as client:
        store = client.documents
        try:
            print_step(1, "Create single documents")
            print_envelope("JSON text", await store.create_one(
                f'{{"id": "json-{run_id}", "name": "Ann", "city": "Oslo", "run": "{run_id}"}}'))
            xml_created = await store.create_one(
                f'<customer run="{run_id}"><name>Bob</name><city>Bergen</city></customer>')
            print_envelope("XML text", xml_created)
            print_envelope("Pydantic model", await store.create_one(
                Customer(id=f"model-{run_id}", name="Cy", city="Oslo")))
            print_envelope("Duplicate id", await store.create_one({"id": f"json-{run_id}"}))

            print_step(2, "Create a batch with an empty and an unparsable item")
            print_batch("create_batch", await store.create_batch([
                {"id": f"batch-a-{run_id}", "run": run_id, "city": "Oslo"},
                "{}",
                "neither json nor xml",
                {"id": f"batch-b-{run_id}", "run": run_id, "city": "Oslo"},
            ]))

            print_step(3, "Read documents page by page")
            query = FieldPredicate("run", Comparator.EQ, run_id)
            page = await store.read_many(query, max_count=2)
            print_envelope("Page 1", page)
            if page.continuation_token:
                print_envelope("Page 2", await store.read_many(
                    query, max_count=2, continuation_token=page.continuation_token))
            print_envelope("As XML", await store.read_one(f"json-{run_id}", shape=ReturnShape.XML))
            print_envelope("Missing id", await store.read_one(f"missing-{run_id}"))

            print_step(4, "Replace a document read back from the database")
            read = await store.read_one(f"json-{run_id}")
            if not read.has_error:
                stored = StoredDocument.from_json(read.body)
                stored["city"] = "Trondheim"
                print_envelope("Replace", await store.replace_one(stored))
            print_envelope("Replace without locator", await store.replace_one({"id": f"json-{run_id}"}))

            print_step(5, "Delete documents")
            print_batch("delete_batch", await store.delete_batch([
                f"json-{run_id}", xml_created.body, f"model-{run_id}", f"batch-a-{run_id}", f"batch-b-{run_id}",
                f"missing-{run_id}"
            ]))

            print_section("Operation Statistics")
            for name, stats in store.get_performance_summary().items():
                print(f"  {name}: {stats.total_operations} ops, "
                      f"{stats.success_rate:.0f}% ok, avg {stats.average_execution_time * 1000:.1f}ms")
        except ConnectionInitializationError as e:
            print_error(f"Could not open the collection: {e}")


if __name__ == "__main__":
    asyncio.run(main())
