"""Unit tests for the Bongo document store."""

from pathlib import Path
from typing import Optional

import pytest

from bongo import (
    Bongo,
    BongoDoc,
    BongoService,
    CollectionNotFoundError,
    DocumentValidationError,
    EngineError,
    FieldDeclaration,
    QueryOptions,
    StorageType,
    StoreConnectionError,
    doc_field,
)
from bongo.settings import StoreSettings
from bongo.store.store import normalize_path


class Account(BongoDoc):
    email: str = doc_field(unique=True)
    balance: Optional[float] = None


class TestNormalizePath:

    def test_appends_suffix(self):
        assert normalize_path("data/app") == "data/app.sqlite"
    
    def test_keeps_suffix(self):
        assert normalize_path("data/app.sqlite") == "data/app.sqlite"


class TestConstruction:

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "store"
        
        bongo = Bongo(path)
        
        assert bongo.path == str(path) + ".sqlite"
        assert (tmp_path / "a" / "b").is_dir()
    
    def test_path_from_settings(self, tmp_path):
        settings = StoreSettings(path=str(tmp_path / "configured"))
        
        bongo = Bongo(settings=settings)
        
        assert bongo.path == str(tmp_path / "configured.sqlite")
    
    def test_unusable_directory_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        
        with pytest.raises(StoreConnectionError) as exc_info:
            Bongo(blocker / "store")
        
        assert exc_info.value.path.endswith("store.sqlite")
    
    @pytest.mark.asyncio
    async def test_initialize_creates_file(self, db_path):
        async with Bongo(db_path) as bongo:
            assert Path(bongo.path).exists()
    
    @pytest.mark.asyncio
    async def test_initialize_on_directory_fails(self, tmp_path):
        (tmp_path / "taken.sqlite").mkdir()
        bongo = Bongo(tmp_path / "taken")
        
        with pytest.raises(StoreConnectionError):
            await bongo.initialize()
    
    def test_generate_id_static(self):
        assert len(Bongo.generate_id()) == 22
    
    def test_service_holds_store(self, db_path):
        service = BongoService(db_path)
        
        assert isinstance(service.bongo, Bongo)
        assert service.bongo.path == db_path + ".sqlite"


class TestCollections:

    @pytest.mark.asyncio
    async def test_create_collection_from_shape(self, store):
        await store.create_collection("users")
        
        assert await store.schema.column_names("users") == ["_id", "name", "age"]
        assert store.collection_shapes["users"] == "users"
    
    @pytest.mark.asyncio
    async def test_create_collection_twice(self, store):
        await store.create_collection("users")
        await store.create_collection("users")
        
        assert await store.schema.column_names("users") == ["_id", "name", "age"]
    
    @pytest.mark.asyncio
    async def test_create_collection_with_named_shape(self, store):
        await store.create_collection("people", "users")
        
        assert await store.schema.column_names("people") == ["_id", "name", "age"]
    
    @pytest.mark.asyncio
    async def test_create_collection_from_model(self, store):
        await store.create_collection("accounts", Account)
        
        assert await store.schema.column_names("accounts") == ["_id", "email", "balance"]
        assert "Account" in store.registry
    
    @pytest.mark.asyncio
    async def test_additive_migration(self, store):
        await store.create_collection("users")
        await store.insert("users", {"name": "Ann", "age": 30})
        
        store.registry.declare_field(
            "users", "city", FieldDeclaration(type=StorageType.TEXT)
        )
        await store.create_collection("users")
        
        assert await store.schema.column_names("users") == ["_id", "name", "age", "city"]
        [doc] = await store.find("users")
        assert doc["city"] is None
        assert doc["age"] == 30
    
    @pytest.mark.asyncio
    async def test_create_collection_raw(self, store):
        await store.create_collection_raw("logs", [
            FieldDeclaration(name="level"),
            FieldDeclaration(name="at", type=StorageType.REAL),
        ])
        
        assert await store.schema.column_names("logs") == ["_id", "level", "at"]
    
    @pytest.mark.asyncio
    async def test_alter_collection_creates_empty_tmp(self, store):
        await store.create_collection("users")
        await store.insert("users", {"name": "Ann"})
        
        tmp = await store.alter_collection("users")
        
        assert tmp == "users_tmp"
        assert await store.schema.column_names("users_tmp") == ["_id", "name", "age"]
        assert await store.find("users_tmp") == []
        assert len(await store.find("users")) == 1
    
    @pytest.mark.asyncio
    async def test_ensure_index_twice(self, store):
        await store.create_collection("users")
        
        await store.ensure_index("users", ["name"], True)
        await store.ensure_index("users", ["name"], True)
        
        await store.insert("users", {"name": "Ann"})
        with pytest.raises(EngineError):
            await store.insert("users", {"name": "Ann"})
    
    @pytest.mark.asyncio
    async def test_list_collections(self, store):
        await store.create_collection("users")
        await store.create_collection("accounts", Account)
        
        assert await store.list_collections() == ["accounts", "users"]


class TestCrud:

    @pytest.fixture
    def ann(self) -> dict:
        return {"name": "Ann", "age": 30}
    
    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, store, ann):
        await store.create_collection("users")
        
        result = await store.insert("users", ann)
        
        assert len(result.inserted_id) == 22
        [doc] = await store.find("users")
        assert doc["_id"] == result.inserted_id
    
    @pytest.mark.asyncio
    async def test_insert_preserves_given_id(self, store):
        await store.create_collection("users")
        
        result = await store.insert_one("users", {"_id": "my-own-id", "name": "Bob"})
        
        assert result.inserted_id == "my-own-id"
        doc = await store.find_one("users", {"_id": "my-own-id"})
        assert doc["name"] == "Bob"
        assert doc["key"] == "n-id"
    
    @pytest.mark.asyncio
    async def test_insert_does_not_mutate_input(self, store, ann):
        await store.create_collection("users")
        
        await store.insert("users", ann)
        
        assert "_id" not in ann
    
    @pytest.mark.asyncio
    async def test_key_is_not_stored(self, store):
        await store.create_collection("users")
        
        await store.insert("users", {"name": "Ann", "key": "zzzz"})
        
        assert await store.schema.column_names("users") == ["_id", "name", "age"]
    
    @pytest.mark.asyncio
    async def test_insert_model(self, store):
        await store.create_collection("accounts", Account)
        account = Account(email="ann@example.com", balance=12.5)
        
        result = await store.insert("accounts", account)
        
        assert result.inserted_id == account.id
        [found] = await store.find("accounts", model=Account)
        assert isinstance(found, Account)
        assert found.balance == 12.5
        assert found.key == account.id[-4:]
    
    @pytest.mark.asyncio
    async def test_insert_missing_collection(self, store, ann):
        with pytest.raises(CollectionNotFoundError) as exc_info:
            await store.insert("ghosts", ann)
        
        assert exc_info.value.collection == "ghosts"
    
    @pytest.mark.asyncio
    async def test_find_empty_filter_returns_all(self, store):
        await store.create_collection("users")
        for name in ("Ann", "Bob", "Cid"):
            await store.insert("users", {"name": name})
        
        docs = await store.find("users", {})
        
        assert sorted(doc["name"] for doc in docs) == ["Ann", "Bob", "Cid"]
    
    @pytest.mark.asyncio
    async def test_find_no_match_is_empty(self, store, ann):
        await store.create_collection("users")
        await store.insert("users", ann)
        
        assert await store.find("users", {"name": "Nobody"}) == []
    
    @pytest.mark.asyncio
    async def test_find_missing_collection_raises(self, store):
        with pytest.raises(CollectionNotFoundError):
            await store.find("ghosts")
    
    @pytest.mark.asyncio
    async def test_find_sort_limit_offset(self, store):
        await store.create_collection("users")
        for age in (30, 10, 40, 20):
            await store.insert("users", {"name": f"u{age}", "age": age})
        
        docs = await store.find(
            "users",
            options=QueryOptions(sort={"age": -1}, limit=2, offset=1),
        )
        
        assert [doc["age"] for doc in docs] == [30, 20]
    
    @pytest.mark.asyncio
    async def test_find_is_injection_safe(self, store, ann):
        await store.create_collection("users")
        await store.insert("users", ann)
        
        docs = await store.find("users", {"name": "x' OR '1'='1"})
        
        assert docs == []
    
    @pytest.mark.asyncio
    async def test_quotes_roundtrip(self, store):
        await store.create_collection("users")
        
        await store.insert("users", {"name": "O'Brien"})
        
        assert (await store.find_one("users", {"name": "O'Brien"}))["name"] == "O'Brien"
    
    @pytest.mark.asyncio
    async def test_find_one_none(self, store):
        await store.create_collection("users")
        
        assert await store.find_one("users", {"name": "Nobody"}) is None
    
    @pytest.mark.asyncio
    async def test_find_one_respects_sort(self, store):
        await store.create_collection("users")
        for age in (30, 10, 40):
            await store.insert("users", {"name": "same", "age": age})
        
        doc = await store.find_one("users", {"name": "same"}, QueryOptions(sort={"age": 1}))
        
        assert doc["age"] == 10
    
    @pytest.mark.asyncio
    async def test_update_only_matching_rows(self, store):
        await store.create_collection("users")
        for name, age in (("Ann", 30), ("Ann", 31), ("Bob", 30)):
            await store.insert("users", {"name": name, "age": age})
        
        result = await store.update("users", {"name": "Ann"}, {"age": 50})
        
        assert result.matched_count == 2
        assert result.modified_count == 2
        assert len(await store.find("users", {"age": 50})) == 2
        assert (await store.find_one("users", {"name": "Bob"}))["age"] == 30
    
    @pytest.mark.asyncio
    async def test_update_no_match(self, store):
        await store.create_collection("users")
        
        result = await store.update("users", {"name": "Nobody"}, {"age": 1})
        
        assert result.matched_count == 0
        assert result.modified_count == 0
    
    @pytest.mark.asyncio
    async def test_update_empty_values(self, store, ann):
        await store.create_collection("users")
        await store.insert("users", ann)
        
        result = await store.update("users", {"name": "Ann"}, {})
        
        assert result.matched_count == 1
        assert result.modified_count == 0
    
    @pytest.mark.asyncio
    async def test_update_id_is_immutable(self, store, ann):
        await store.create_collection("users")
        await store.insert("users", ann)
        
        with pytest.raises(DocumentValidationError) as exc_info:
            await store.update("users", {"name": "Ann"}, {"_id": "other"})
        
        assert exc_info.value.field == "_id"
    
    @pytest.mark.asyncio
    async def test_update_missing_collection_raises(self, store):
        with pytest.raises(CollectionNotFoundError):
            await store.update("ghosts", {"name": "Ann"}, {"age": 1})
    
    @pytest.mark.asyncio
    async def test_delete_one_removes_single(self, store):
        await store.create_collection("users")
        await store.insert("users", {"name": "Ann"})
        await store.insert("users", {"name": "Ann"})
        
        result = await store.delete_one("users", {"name": "Ann"})
        
        assert result.deleted_count == 1
        assert len(await store.find("users")) == 1
    
    @pytest.mark.asyncio
    async def test_delete_one_no_match(self, store):
        await store.create_collection("users")
        
        assert (await store.delete_one("users", {"name": "Nobody"})).deleted_count == 0
    
    @pytest.mark.asyncio
    async def test_delete_one_missing_collection_raises(self, store):
        with pytest.raises(CollectionNotFoundError):
            await store.delete_one("ghosts", {"name": "Ann"})
    
    @pytest.mark.asyncio
    async def test_delete_many(self, store):
        await store.create_collection("users")
        for name in ("Ann", "Ann", "Bob"):
            await store.insert("users", {"name": name})
        
        result = await store.delete_many("users", {"name": "Ann"})
        
        assert result.deleted_count == 2
        assert [doc["name"] for doc in await store.find("users")] == ["Bob"]
    
    @pytest.mark.asyncio
    async def test_delete_many_missing_collection_is_zero(self, store):
        result = await store.delete_many("never_created", {"name": "Ann"})
        
        assert result.deleted_count == 0


class TestDatabase:

    @pytest.mark.asyncio
    async def test_truncate_all_keeps_schema(self, store):
        await store.create_collection("users")
        await store.create_collection("accounts", Account)
        await store.insert("users", {"name": "Ann"})
        await store.insert("accounts", {"email": "a@example.com"})
        
        await store.truncate_all()
        
        assert await store.find("users") == []
        assert await store.find("accounts") == []
        assert await store.schema.column_names("users") == ["_id", "name", "age"]
    
    @pytest.mark.asyncio
    async def test_truncate_all_clears_sqlite_prefixed_collection(self, store):
        await store.create_collection("sqliteusers", "users")
        await store.insert("sqliteusers", {"name": "Ann"})
        
        await store.truncate_all()
        
        assert "sqliteusers" in await store.list_collections()
        assert await store.find("sqliteusers") == []
    
    @pytest.mark.asyncio
    async def test_drop_database(self, store):
        await store.create_collection("users")
        await store.insert("users", {"name": "Ann"})
        
        await store.drop_database()
        
        assert await store.list_collections() == []
        assert store.collection_shapes == {}
        assert Path(store.path).exists()
        with pytest.raises(CollectionNotFoundError):
            await store.find("users")


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_users_lifecycle(self, store):
        await store.create_collection("users")
        
        result = await store.insert("users", {"name": "Ann", "age": 30})
        assert result.inserted_id
        
        [doc] = await store.find("users", {"name": "Ann"})
        assert doc["age"] == 30
        assert doc["key"] == result.inserted_id[-4:]
        assert len(doc["key"]) == 4
        
        await store.update("users", {"name": "Ann"}, {"age": 31})
        [doc] = await store.find("users", {"name": "Ann"})
        assert doc["age"] == 31
        
        deleted = await store.delete_one("users", {"name": "Ann"})
        assert deleted.deleted_count == 1
        
        assert await store.find("users", {"name": "Ann"}) == []
    
    @pytest.mark.asyncio
    async def test_reopen_persists(self, db_path, registry):
        async with Bongo(db_path, registry=registry) as bongo:
            await bongo.create_collection("users")
            await bongo.insert("users", {"_id": "persisted", "name": "Ann"})
        
        async with Bongo(db_path, registry=registry) as bongo:
            doc = await bongo.find_one("users", {"_id": "persisted"})
        
        assert doc["name"] == "Ann"
