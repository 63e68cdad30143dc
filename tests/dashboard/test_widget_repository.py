"""Tests for WidgetRepository over the in-memory embedded backend."""

from __future__ import annotations

import pytest

from widgetdeck.dashboard.db.embedded import EmbeddedDriver
from widgetdeck.dashboard.managers.errors import RepositoryError, WidgetLockedError, WidgetNotFoundError
from widgetdeck.dashboard.managers.folders import FolderRepository
from widgetdeck.dashboard.managers.widgets import WidgetRepository
from widgetdeck.dashboard.models.enums import WidgetType
from widgetdeck.dashboard.models.widget import WidgetCreate
from widgetdeck.dashboard.storage import StorageRouter
from widgetdeck.dashboard.store.local import LocalImageSink


def _note(title: str = "t", **kwargs) -> WidgetCreate:
    return WidgetCreate(title=title, type=kwargs.pop("type", WidgetType.NOTE), **kwargs)


async def _insert(router: StorageRouter, widget_id: str, updated_at: str, **columns) -> None:
    values = {
        "id": widget_id,
        "title": widget_id,
        "content": "",
        "type": "note",
        "tags": "[]",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": updated_at,
        **columns,
    }
    names = ", ".join(values)
    marks = ", ".join("?" for _ in values)
    result = await router.execute_storage(f"INSERT INTO widgets ({names}) VALUES ({marks})", list(values.values()))
    assert result.success, result.error


# -- Create / read ------------------------------------------------------------


async def test_create_then_get_round_trips(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(
        WidgetCreate(
            title="Server",
            content="dev box",
            type=WidgetType.CREDENTIAL,
            tags=["server", "security"],
            is_protected=True,
            credential_type="server",
            custom_fields={"username": "admin", "port": "22"},
        )
    )

    assert created.id.startswith("widget-")
    assert created.created_at == created.updated_at
    assert await widget_repo.get_widget_by_id(created.id) == created


async def test_create_stores_empty_optionals_as_null(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(
        WidgetCreate(title="t", type=WidgetType.LINK, url="", credential_type="", custom_fields={})
    )

    assert (created.url, created.credential_type, created.custom_fields) == (None, None, None)
    assert await widget_repo.get_widget_by_id(created.id) == created


async def test_create_accepts_storage_aliases(widget_repo: WidgetRepository) -> None:
    payload = WidgetCreate.model_validate(
        {"title": "Vault", "type": "credential", "isProtected": True, "customFields": {"pin": "1234"}}
    )
    created = await widget_repo.create_widget(payload)

    fetched = await widget_repo.get_widget_by_id(created.id)
    assert fetched is not None
    assert fetched.is_protected is True
    assert fetched.custom_fields == {"pin": "1234"}


async def test_create_keeps_folder(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note(folder_id="folder-notes"))
    fetched = await widget_repo.get_widget_by_id(created.id)
    assert fetched is not None
    assert fetched.folder_id == "folder-notes"


async def test_get_missing_returns_none(widget_repo: WidgetRepository) -> None:
    assert await widget_repo.get_widget_by_id("widget-missing") is None


async def test_get_all_orders_by_updated_desc(widget_repo: WidgetRepository, router: StorageRouter) -> None:
    await _insert(router, "old", "2024-01-01T00:00:00.000Z")
    await _insert(router, "newest", "2024-03-01T00:00:00.000Z")
    await _insert(router, "middle", "2024-02-01T00:00:00.000Z")

    assert [w.id for w in await widget_repo.get_all_widgets()] == ["newest", "middle", "old"]


async def test_get_by_type(widget_repo: WidgetRepository) -> None:
    link = await widget_repo.create_widget(_note("site", type=WidgetType.LINK, url="https://example.com"))
    await widget_repo.create_widget(_note("memo"))

    links = await widget_repo.get_widgets_by_type(WidgetType.LINK)
    assert [w.id for w in links] == [link.id]
    assert links[0].url == "https://example.com"
    assert await widget_repo.get_widgets_by_type("credential") == []


# -- Search and tags ----------------------------------------------------------


async def test_search_ignores_tags_but_tag_lookup_finds_them(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note("t", content="c", tags=["x", "y"]))

    assert await widget_repo.search_widgets("x") == []
    assert [w.id for w in await widget_repo.get_widgets_by_tag("x")] == [created.id]


async def test_search_matches_title_or_content(widget_repo: WidgetRepository) -> None:
    by_title = await widget_repo.create_widget(_note("Quarterly report"))
    by_content = await widget_repo.create_widget(_note("Misc", content="draft the report"))
    await widget_repo.create_widget(_note("Groceries"))

    found = {w.id for w in await widget_repo.search_widgets("report")}
    assert found == {by_title.id, by_content.id}


async def test_tag_lookup_is_substring_match(widget_repo: WidgetRepository) -> None:
    homework = await widget_repo.create_widget(_note("hw", tags=["homework"]))
    assert [w.id for w in await widget_repo.get_widgets_by_tag("work")] == [homework.id]


async def test_tag_counts_count_every_occurrence(widget_repo: WidgetRepository) -> None:
    for tags in (["a", "b"], ["a"], ["b", "b"]):
        await widget_repo.create_widget(_note(tags=tags))

    assert await widget_repo.get_tag_counts() == [("b", 3), ("a", 2)]


async def test_tag_counts_empty(widget_repo: WidgetRepository) -> None:
    assert await widget_repo.get_tag_counts() == []


# -- Update / delete ----------------------------------------------------------


async def test_update_rewrites_fields(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note("before", tags=["x"]))

    changed = created.model_copy(update={"title": "after", "tags": ["y", "z"]})
    updated = await widget_repo.update_widget(changed)

    assert updated.title == "after"
    assert updated.updated_at >= created.updated_at
    assert updated.created_at == created.created_at
    assert await widget_repo.get_widget_by_id(created.id) == updated


async def test_update_keeps_stored_folder(widget_repo: WidgetRepository, folder_repo: FolderRepository) -> None:
    created = await widget_repo.create_widget(_note())

    updated = await widget_repo.update_widget(created.model_copy(update={"folder_id": "folder-notes", "url": ""}))
    assert updated.folder_id is None
    assert updated.url is None
    assert await widget_repo.get_widget_by_id(created.id) == updated

    assert await folder_repo.move_widget_to_folder(created.id, "folder-notes")
    renamed = await widget_repo.update_widget(updated.model_copy(update={"title": "renamed", "folder_id": None}))
    assert renamed.title == "renamed"
    assert renamed.folder_id == "folder-notes"


async def test_update_missing_widget_raises(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note())
    assert await widget_repo.delete_widget(created.id)

    with pytest.raises(WidgetNotFoundError):
        await widget_repo.update_widget(created)


async def test_delete(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note())

    assert await widget_repo.delete_widget(created.id) is True
    assert await widget_repo.get_widget_by_id(created.id) is None
    # Deleting a missing id is not an error.
    assert await widget_repo.delete_widget(created.id) is True


# -- Protected items ----------------------------------------------------------


async def test_unlock_protected_widget(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note("vault", type=WidgetType.CREDENTIAL, is_protected=True))
    calls: list[tuple[str, str]] = []

    async def verify(secret: str, widget_id: str) -> bool:
        calls.append((secret, widget_id))
        return secret == "open sesame"

    with pytest.raises(WidgetLockedError):
        await widget_repo.unlock_widget(created.id, "wrong", verify)

    unlocked = await widget_repo.unlock_widget(created.id, "open sesame", verify)
    assert unlocked.id == created.id
    assert calls == [("wrong", created.id), ("open sesame", created.id)]


async def test_unlock_unprotected_skips_check(widget_repo: WidgetRepository) -> None:
    created = await widget_repo.create_widget(_note())

    async def verify(secret: str, widget_id: str) -> bool:
        raise AssertionError

    assert (await widget_repo.unlock_widget(created.id, "", verify)).id == created.id


async def test_unlock_missing_widget(widget_repo: WidgetRepository) -> None:
    async def verify(secret: str, widget_id: str) -> bool:
        return True

    with pytest.raises(WidgetNotFoundError):
        await widget_repo.unlock_widget("widget-missing", "x", verify)


# -- Failure and durability ---------------------------------------------------


async def test_storage_failure_raises_repository_error(widget_repo: WidgetRepository, router: StorageRouter) -> None:
    router.toggle_storage_type()

    with pytest.raises(RepositoryError, match="API credentials not configured"):
        await widget_repo.get_all_widgets()
    with pytest.raises(RepositoryError):
        await widget_repo.create_widget(_note())

    assert await widget_repo.get_widget_by_id("anything") is None
    assert await widget_repo.delete_widget("anything") is False


async def test_mutations_flush_image(tmp_path) -> None:
    sink = LocalImageSink(tmp_path / "dashboard.sqlite")
    router = StorageRouter(EmbeddedDriver(sink, seed_sample_data=False))
    repo = WidgetRepository(router)

    created = await repo.create_widget(_note("persisted"))

    reloaded = WidgetRepository(StorageRouter(EmbeddedDriver(sink, seed_sample_data=False)))
    assert await reloaded.get_widget_by_id(created.id) == created
