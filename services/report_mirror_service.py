"""
Report mirror service: copy a processed row onto a report board.

Source and report boards are shaped differently, so each source column
is routed to a report column by:
1. an explicit override (target id -> source id), highest priority
2. otherwise an exact match of normalized column titles

monday.com rejects board relation (and some other) values in
create_item, so values are split into an `initial` payload sent with the
creation and a `post` payload written right after it.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional
import structlog

from exceptions import MondayError
from models.batch import MappingOverride, MirrorExtras, RelationHint
from models.board import Column, ColumnKind, Item
from services.board_service import BoardService, get_board_service
from utils.column_codec import (
    date_payload,
    decode_linked_ids,
    link_payload,
    people_payload,
    to_write_payload,
)
from utils.text_utils import normalize_title

logger = structlog.get_logger(__name__)


@dataclass
class MirrorPlan:
    """Payloads for the two-phase write of a mirrored row."""

    initial: dict[str, Any] = field(default_factory=dict)
    post: dict[str, Any] = field(default_factory=dict)
    links: dict[str, int] = field(default_factory=dict)  # target column -> linked item

    def route(self, column_id: str, kind: ColumnKind, payload: Any) -> None:
        if kind.is_creatable:
            self.initial[column_id] = payload
        else:
            self.post[column_id] = payload


class ReportMirrorService:
    """
    Creates report rows mirroring entry/exit rows.
    """

    def __init__(self, board_service: Optional[BoardService] = None):
        self.board_service = board_service or get_board_service()

    # ===================
    # PLANNING
    # ===================

    def plan(
        self,
        source_item: Item,
        source_columns: list[Column],
        target_columns: list[Column],
        overrides: Iterable[MappingOverride] = (),
        relation_hints: Iterable[RelationHint] = (),
        extras: Optional[MirrorExtras] = None,
        copy_columns: bool = True,
    ) -> MirrorPlan:
        """
        Work out what to write on the report row.

        Args:
            source_item: Row being mirrored
            source_columns: Columns of the source board (for titles)
            target_columns: Columns of the report board
            overrides: Explicit column pairings
            relation_hints: Items the report row must link to
            extras: Date / person stamps
            copy_columns: Also map columns by title

        Returns:
            MirrorPlan with initial, post and relation link payloads
        """
        overrides = list(overrides)
        plan = MirrorPlan()

        target_by_id = {c.id: c for c in target_columns}
        target_by_title = {normalize_title(c.title): c for c in target_columns}
        source_titles = {c.id: c.title for c in source_columns}

        plan.links = self._resolve_links(relation_hints, source_titles, target_by_title)

        # 1) Explicit overrides
        override_targets = {o.target_column_id for o in overrides}
        override_sources = {o.source_column_id for o in overrides}
        for override in overrides:
            cv = source_item.column(override.source_column_id)
            if cv is None:
                continue

            target = target_by_id.get(override.target_column_id)
            kind = target.kind if target else ColumnKind.from_api_type(override.type_hint)
            payload = to_write_payload(cv, kind)
            if payload is None:
                continue
            plan.route(override.target_column_id, kind, payload)

        # 2) Title matching
        if copy_columns:
            for cv in source_item.column_values:
                if cv.id in override_sources:
                    continue

                title = source_titles.get(cv.id)
                if not title:
                    continue
                target = target_by_title.get(normalize_title(title))
                if target is None or target.id in override_targets:
                    continue

                kind = target.kind
                if not kind.is_copyable:
                    continue

                if kind is ColumnKind.BOARD_RELATION:
                    linked = decode_linked_ids(cv)
                    if linked:
                        plan.post[target.id] = link_payload(linked)
                    elif target.id in plan.links:
                        plan.post[target.id] = link_payload([plan.links[target.id]])
                    continue

                payload = to_write_payload(cv, kind)
                if payload is None:
                    continue
                plan.route(target.id, kind, payload)

        # 3) Extras
        if extras is not None:
            if extras.date_column_id:
                plan.initial[extras.date_column_id] = date_payload(
                    extras.date_iso or date.today().isoformat()
                )
            if extras.person_column_id and extras.user_id:
                plan.post[extras.person_column_id] = people_payload([extras.user_id])

        return plan

    def _resolve_links(
        self,
        relation_hints: Iterable[RelationHint],
        source_titles: dict[str, str],
        target_by_title: dict[str, Column],
    ) -> dict[str, int]:
        links: dict[str, int] = {}
        for hint in relation_hints:
            target_id = hint.target_column_id
            if not target_id:
                title = source_titles.get(hint.source_column_id or "") or hint.source_title
                target = target_by_title.get(normalize_title(title)) if title else None
                target_id = target.id if target else None

            if target_id:
                links[target_id] = hint.catalog_item_id
            else:
                logger.warning(
                    "relation_target_unresolved",
                    catalog_item_id=hint.catalog_item_id,
                    source_title=hint.source_title
                )
        return links

    # ===================
    # WRITING
    # ===================

    def copy(
        self,
        source_item: Item,
        target_board_id: Any,
        target_group_id: Optional[str] = None,
        overrides: Iterable[MappingOverride] = (),
        relation_hints: Iterable[RelationHint] = (),
        extras: Optional[MirrorExtras] = None,
        copy_columns: bool = True,
    ) -> Optional[str]:
        """
        Create the report row.

        Follow-up writes (post payload, relation links) are not rolled back
        if they fail: the row stays with whatever the creation set.

        Returns:
            Id of the report row, or None if it could not be created

        Raises:
            MondayError: If reading board columns or creating the row fails
        """
        if not target_board_id:
            return None

        source_columns = (
            self.board_service.get_board_columns(source_item.board_id)
            if source_item.board_id else []
        )
        target_columns = self.board_service.get_board_columns(target_board_id)

        plan = self.plan(
            source_item,
            source_columns,
            target_columns,
            overrides=overrides,
            relation_hints=relation_hints,
            extras=extras,
            copy_columns=copy_columns,
        )

        new_id = self.board_service.create_item(
            target_board_id,
            target_group_id,
            source_item.name,
            plan.initial,
        )
        if not new_id:
            logger.error("report_item_not_created", source_item_id=source_item.id)
            return None

        if plan.post:
            self._follow_up(new_id, target_board_id, plan.post, source_item.id, "post")

        # Write the links again in case title matching produced something else
        if plan.links:
            self._follow_up(
                new_id,
                target_board_id,
                {column_id: link_payload([item_id]) for column_id, item_id in plan.links.items()},
                source_item.id,
                "links",
            )

        logger.info(
            "report_item_mirrored",
            source_item_id=source_item.id,
            report_item_id=new_id,
            initial_columns=len(plan.initial),
            post_columns=len(plan.post),
            links=len(plan.links)
        )
        return new_id

    def _follow_up(
        self,
        new_id: str,
        board_id: Any,
        column_values: dict,
        source_item_id: str,
        step: str,
    ) -> None:
        """Write after creation; a failure is logged and the row is kept."""
        try:
            self.board_service.change_column_values(new_id, board_id, column_values)
        except MondayError as e:
            logger.warning(
                "report_item_partially_written",
                report_item_id=new_id,
                source_item_id=source_item_id,
                step=step,
                error=e.message
            )


# Singleton instance for convenience
_report_mirror_service: Optional[ReportMirrorService] = None


def get_report_mirror_service() -> ReportMirrorService:
    """Get or create ReportMirrorService instance."""
    global _report_mirror_service
    if _report_mirror_service is None:
        _report_mirror_service = ReportMirrorService()
    return _report_mirror_service
