"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety. Batch services do
not read Settings directly: entry_config()/exit_config() freeze the
relevant values into an immutable config object per run.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional

from models.batch import DisposalMode, MappingOverride
from models.config import (
    CatalogConfig,
    ReportConfig,
    EntryBatchConfig,
    ExitBatchConfig,
)


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Board and column ids are left optional so the service can start
    before the deployment is fully configured.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # MONDAY.COM
    # ===================
    monday_api_token: Optional[str] = Field(
        None,
        description="monday.com personal API token"
    )
    monday_api_url: str = Field(
        default="https://api.monday.com/v2",
        description="monday.com GraphQL endpoint"
    )
    monday_api_version: Optional[str] = Field(
        default="2023-10",
        description="Value of the API-Version header"
    )
    monday_timeout_seconds: int = Field(
        default=30,
        ge=1,
        le=300,
        description="HTTP timeout per GraphQL call"
    )

    # ===================
    # ENTRY BOARD
    # ===================
    entry_board_id: Optional[str] = None
    entry_group_id: str = "topics"
    entry_qty_column_id: Optional[str] = None
    entry_barcode_source: str = Field(
        default="name",
        description="'name' to use the item name, otherwise a column id"
    )
    entry_qc_checkbox_column_id: Optional[str] = None
    entry_count_done_checkbox_column_id: Optional[str] = None
    entry_alert_people_column_id: Optional[str] = None
    entry_product_link_column_id: Optional[str] = None
    entry_last_price_column_id: Optional[str] = None
    entry_notes_text_id: Optional[str] = None
    qc_alert_user_ids: str = Field(
        default="",
        description="Comma separated monday.com user ids notified by the QC gate"
    )

    # ===================
    # CATALOG BOARD
    # ===================
    catalog_board_id: Optional[str] = None
    catalog_barcode_column_id: Optional[str] = None
    catalog_stock_column_id: Optional[str] = None

    # ===================
    # ENTRY REPORT BOARD
    # ===================
    report_board_id: Optional[str] = None
    create_report_group: bool = True
    report_copy_columns: bool = True
    delete_mode: str = "archive"
    complete_delete_mode: str = "delete"
    report_date_column_id: Optional[str] = None
    report_person_column_id: Optional[str] = None
    report_product_link_column_id: Optional[str] = None
    report_last_price_column_id: Optional[str] = None
    report_qc_checkbox_column_id: Optional[str] = None
    report_count_done_checkbox_column_id: Optional[str] = None
    report_notes_text_id: Optional[str] = None

    # ===================
    # EXIT BOARD
    # ===================
    exit_board_id: Optional[str] = None
    exit_group_id: str = "topics"
    exit_barcode_source: str = "name"
    exit_qty_column_id: Optional[str] = None
    exit_product_rel_column_id: Optional[str] = None
    exit_target_rel_column_id: Optional[str] = None
    exit_unit_dropdown_id: Optional[str] = None
    exit_delete_mode: str = "delete"
    exit_complete_delete_mode: str = "delete"

    # ===================
    # EXIT REPORT BOARD
    # ===================
    exit_report_board_id: Optional[str] = None
    create_exit_report_group: bool = True
    exit_report_copy_columns: bool = False
    exit_report_qty_column_id: Optional[str] = None
    exit_report_unit_dropdown_id: Optional[str] = None
    exit_report_date_column_id: Optional[str] = None
    exit_report_product_rel_column_id: Optional[str] = None
    exit_report_people_column_id: Optional[str] = None
    exit_report_target_rel_column_id: Optional[str] = None

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8080,
        ge=1000,
        le=65535,
        description="API port"
    )
    allowed_origin: str = Field(
        default="*",
        description="CORS origin, '*' allows any"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def monday_configured(self) -> bool:
        """Check if a monday.com token is available."""
        return bool(self.monday_api_token)

    @property
    def alert_user_ids(self) -> tuple[int, ...]:
        """Parse QC_ALERT_USER_IDS, silently dropping non-numeric entries."""
        ids = []
        for part in self.qc_alert_user_ids.split(","):
            part = part.strip()
            if part.lstrip("-").isdigit():
                ids.append(int(part))
        return tuple(ids)

    # ===================
    # BATCH CONFIG BUILDERS
    # ===================
    def catalog_config(self) -> CatalogConfig:
        return CatalogConfig(
            board_id=self.catalog_board_id,
            barcode_column_id=self.catalog_barcode_column_id,
            stock_column_id=self.catalog_stock_column_id,
        )

    def entry_config(self) -> EntryBatchConfig:
        """Freeze the entry flow configuration."""
        overrides = _overrides([
            (self.report_last_price_column_id, self.entry_last_price_column_id, "numeric"),
            (self.report_qc_checkbox_column_id, self.entry_qc_checkbox_column_id, "checkbox"),
            (self.report_count_done_checkbox_column_id, self.entry_count_done_checkbox_column_id, "checkbox"),
            (self.report_notes_text_id, self.entry_notes_text_id, "text"),
        ])

        return EntryBatchConfig(
            board_id=self.entry_board_id,
            group_id=self.entry_group_id,
            qty_column_id=self.entry_qty_column_id,
            barcode_source=self.entry_barcode_source,
            qc_checkbox_column_id=self.entry_qc_checkbox_column_id,
            count_checkbox_column_id=self.entry_count_done_checkbox_column_id,
            alert_people_column_id=self.entry_alert_people_column_id,
            alert_user_ids=self.alert_user_ids,
            product_link_column_id=self.entry_product_link_column_id,
            delete_mode=DisposalMode.parse(self.delete_mode, DisposalMode.ARCHIVE),
            complete_delete_mode=DisposalMode.parse(self.complete_delete_mode, DisposalMode.NONE),
            catalog=self.catalog_config(),
            report=ReportConfig(
                board_id=self.report_board_id,
                create_group=self.create_report_group,
                copy_columns=self.report_copy_columns,
                date_column_id=self.report_date_column_id,
                person_column_id=self.report_person_column_id,
                product_link_column_id=self.report_product_link_column_id,
                overrides=overrides,
            ),
        )

    def exit_config(self) -> ExitBatchConfig:
        """Freeze the exit flow configuration."""
        overrides = _overrides([
            (self.exit_report_qty_column_id, self.exit_qty_column_id, "numeric"),
            (self.exit_report_unit_dropdown_id, self.exit_unit_dropdown_id, "dropdown"),
        ])

        return ExitBatchConfig(
            board_id=self.exit_board_id,
            group_id=self.exit_group_id,
            qty_column_id=self.exit_qty_column_id,
            barcode_source=self.exit_barcode_source,
            product_rel_column_id=self.exit_product_rel_column_id,
            target_rel_column_id=self.exit_target_rel_column_id,
            delete_mode=DisposalMode.parse(self.exit_delete_mode, DisposalMode.ARCHIVE),
            complete_delete_mode=DisposalMode.parse(self.exit_complete_delete_mode, DisposalMode.NONE),
            catalog=self.catalog_config(),
            report=ReportConfig(
                board_id=self.exit_report_board_id,
                create_group=self.create_exit_report_group,
                copy_columns=self.exit_report_copy_columns,
                date_column_id=self.exit_report_date_column_id,
                person_column_id=self.exit_report_people_column_id,
                product_link_column_id=self.exit_report_product_rel_column_id,
                target_link_column_id=self.exit_report_target_rel_column_id,
                overrides=overrides,
            ),
        )


def _overrides(pairs: list[tuple[Optional[str], Optional[str], str]]) -> tuple[MappingOverride, ...]:
    """Keep only the (target, source) pairs where both ids are configured."""
    return tuple(
        MappingOverride(target_column_id=target, source_column_id=source, type_hint=hint)
        for target, source, hint in pairs
        if target and source
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
