"""
cosmosrest - Documents Example

Creates a database and a partitioned collection, writes a few documents,
then pages through them with a parameterized query.

Requirements:
    pip install -e .

Usage:
    export COSMOSREST_ENDPOINT=https://<account>.documents.azure.com
    export COSMOSREST_MASTER_KEY=<base64 master key>
    python examples/documents_example.py
"""

from cosmosrest import ConfigManager, CosmosDB
from cosmosrest.core import setup_logging
from cosmosrest.models import Collection, Database, PartitionKeyDef, QueryParameter, QueryWithParameters
from cosmosrest.request import partition_key, throughput_rus

DATABASE = "demo-db"
COLLECTION = "orders"


def main():
    setup_logging("INFO")
    config = ConfigManager().load(cli_overrides={"partition_key_struct_field": "customer"})

    with CosmosDB(config) as cosmos:
        print("\n=== Setup ===\n")
        db = cosmos.create_database(Database(id=DATABASE))
        print(f"✓ Created database {db.id} ({db.self_link})")

        coll = cosmos.create_collection(
            f"dbs/{DATABASE}",
            Collection(id=COLLECTION, partition_key=PartitionKeyDef(paths=["/customer"])),
            opts=[throughput_rus(400)],
        )
        print(f"✓ Created collection {coll.id}")

        coll_link = f"dbs/{DATABASE}/colls/{COLLECTION}"

        print("\n=== Documents ===\n")
        for i in range(5):
            doc = cosmos.create_document(coll_link, {"customer": "c1", "total": 10 * i})
            print(f"  Created {doc['id']} (total={doc['total']})")

        first = cosmos.read_documents(coll_link)[0]
        first.total = 999
        cosmos.replace_document_async(f"{coll_link}/docs/{first.id}", first)
        print(f"✓ Replaced {first.id} with If-Match {first.etag}")

        print("\n=== Paged query ===\n")
        query = QueryWithParameters(
            query="SELECT * FROM root r WHERE r.total >= @min",
            parameters=[QueryParameter(name="@min", value=20)],
        )
        page = []
        pager = cosmos.new_pagable_query(coll_link, query, 2, page)
        while True:
            pager.next()
            print(f"  Page {pager.offset}: {[doc.id for doc in page]}")
            if not pager.continuation:
                break

        print("\n=== Cleanup ===\n")
        cosmos.delete_document(f"{coll_link}/docs/{first.id}", opts=[partition_key("c1")])
        cosmos.delete_database(f"dbs/{DATABASE}")
        print("✓ Done")


if __name__ == "__main__":
    main()
