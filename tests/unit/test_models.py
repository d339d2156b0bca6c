"""Tests for resource models and helpers."""

import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from cosmosrest.exceptions import ParseError
from cosmosrest.models import (
    Collection,
    Database,
    Document,
    DocumentFeed,
    Expirable,
    PartitionKeyDef,
    QueryParameter,
    StoredProcedure,
)
from cosmosrest.utils import gen_id, join_link, querify, stringify


class ExpiringDoc(Document, Expirable):
    pass


class TestResourceModels:
    """Test system property aliases."""

    def test_system_properties_from_wire_names(self):
        database = Database.model_validate({
            "id": "db1",
            "_rid": "b5NCAA==",
            "_self": "dbs/b5NCAA==/",
            "_etag": '"00000100-0000"',
            "_ts": 1459216957,
            "_colls": "colls/",
        })

        assert database.rid == "b5NCAA=="
        assert database.self_link == "dbs/b5NCAA==/"
        assert database.etag == '"00000100-0000"'
        assert database.ts == 1459216957
        assert database.colls == "colls/"

    def test_to_body_omits_empty_system_properties(self):
        assert Database(id="db1").to_body() == {"id": "db1"}

    def test_collection_partition_key(self):
        collection = Collection.model_validate({
            "id": "c1",
            "partitionKey": {"paths": ["/tenant"], "kind": "Hash"},
            "indexingPolicy": {"indexingMode": "consistent", "automatic": True},
        })

        assert collection.partition_key.paths == ["/tenant"]
        assert collection.indexing_policy.indexing_mode == "consistent"

    def test_partition_key_paths_must_be_absolute(self):
        with pytest.raises(ValidationError):
            PartitionKeyDef(paths=["tenant"])

    def test_to_body_keeps_user_fields_equal_to_defaults(self):
        procedure = StoredProcedure(id="sp1", body="")
        assert procedure.to_body() == {"id": "sp1", "body": ""}

    def test_to_body_sends_set_system_properties(self):
        doc = Document(id="d1", etag='"00000a00"')
        assert doc.to_body() == {"id": "d1", "_etag": '"00000a00"'}

    def test_collection_body_omits_unset_policies(self):
        assert Collection(id="c1").to_body() == {"id": "c1"}

        body = Collection(id="c1", partition_key=PartitionKeyDef(paths=["/tenant"])).to_body()
        assert body == {"id": "c1", "partitionKey": {"paths": ["/tenant"], "kind": "Hash"}}

    def test_document_keeps_extra_fields(self):
        doc = Document.model_validate({"id": "d1", "color": "red", "_attachments": "attachments/"})

        assert doc.color == "red"
        assert doc.attachments == "attachments/"
        assert doc.to_body() == {"id": "d1", "_attachments": "attachments/", "color": "red"}

    def test_document_feed(self):
        feed = DocumentFeed[Document].model_validate_json(
            '{"Documents": [{"id": "a"}, {"id": "b"}], "_count": 2}'
        )
        assert [doc.id for doc in feed.documents] == ["a", "b"]
        assert feed.count == 2


class TestExpirable:
    """Test TTL helpers."""

    def test_unset_ttl_is_not_sent(self):
        assert json.loads(stringify(ExpiringDoc(id="d1"))) == {"id": "d1"}

    def test_set_ttl_is_sent(self):
        assert json.loads(stringify(ExpiringDoc(id="d1", ttl=-1))) == {"id": "d1", "ttl": -1}

    def test_set_ttl_rounds_to_seconds(self):
        item = Expirable()
        item.set_ttl(timedelta(minutes=1, milliseconds=600))
        assert item.ttl == 61


class TestUtils:
    """Test helper functions."""

    def test_gen_id_is_unique(self):
        assert gen_id() != gen_id()
        assert len(gen_id()) == 36

    @pytest.mark.parametrize("base,parts,expected", [
        ("https://acct", ("dbs",), "https://acct/dbs"),
        ("https://acct", ("/dbs/db1",), "https://acct/dbs/db1"),
        ("dbs/db1/", ("colls/",), "dbs/db1/colls/"),
        ("dbs/db1", ("colls/",), "dbs/db1/colls/"),
        ("dbs/db1/", ("/colls/",), "dbs/db1/colls/"),
        ("", ("dbs",), "dbs"),
    ])
    def test_join_link(self, base, parts, expected):
        assert join_link(base, *parts) == expected

    def test_querify_escapes_quotes(self):
        body = querify('SELECT * FROM root r WHERE r.name = "O\'Brien"')
        assert json.loads(body) == {"query": 'SELECT * FROM root r WHERE r.name = "O\'Brien"'}

    def test_stringify(self):
        assert stringify("raw") == b"raw"
        assert stringify(b"raw") == b"raw"
        assert json.loads(stringify({"id": "1"})) == {"id": "1"}
        assert json.loads(stringify(Database(id="db1"))) == {"id": "db1"}
        assert json.loads(stringify(QueryParameter(name="@n", value=0))) == {"name": "@n", "value": 0}

    def test_stringify_unserializable(self):
        with pytest.raises(ParseError):
            stringify({"when": object()})
