from __future__ import annotations

from flask import Flask

from ..common.http import current_role, login_required, ok, request_data, supervision_required
from ..container import Container
from .service import parse_kind


def register(app: Flask, container: Container) -> None:
    @app.route("/api/catalog", endpoint="catalog_all")
    @login_required
    def catalog_all():
        lists = container.catalog_service.list_all()
        return ok(**{kind.value: [i.to_dict() for i in items] for kind, items in lists.items()})

    @app.route("/api/catalog/<kind>", endpoint="catalog_list")
    @login_required
    def catalog_list(kind: str):
        items = container.catalog_service.list(parse_kind(kind))
        return ok(items=[i.to_dict() for i in items])

    @app.route("/api/catalog/<kind>", methods=["POST"], endpoint="catalog_add")
    @supervision_required
    def catalog_add(kind: str):
        data = request_data()
        item = container.catalog_service.add(
            current_role=current_role(), kind=parse_kind(kind), name=data.get("name", ""), color=data.get("color")
        )
        return ok(item=item.to_dict()), 201

    @app.route("/api/catalog/<kind>/<item_id>", methods=["PUT"], endpoint="catalog_rename")
    @supervision_required
    def catalog_rename(kind: str, item_id: str):
        data = request_data()
        item = container.catalog_service.rename(
            current_role=current_role(),
            kind=parse_kind(kind),
            item_id=item_id,
            name=data.get("name", ""),
            color=data.get("color"),
        )
        return ok(item=item.to_dict())

    @app.route("/api/catalog/<kind>/<item_id>", methods=["DELETE"], endpoint="catalog_remove")
    @supervision_required
    def catalog_remove(kind: str, item_id: str):
        container.catalog_service.remove(current_role=current_role(), kind=parse_kind(kind), item_id=item_id)
        return ok(message="Item removido.")
