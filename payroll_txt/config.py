"""Application configuration loaded from YAML and validated with pydantic."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .balance import BUCKET_TABLES, BucketTable
from .layouts import recompute_positions
from .models import (
    Alignment,
    DecimalSeparator,
    FieldDescriptor,
    FieldSeparator,
    FillType,
    Layout,
    ReportType,
)


class ConfigError(RuntimeError):
    """Raised when a configuration or layout file cannot be used."""


class LoggingConfig(BaseModel):
    log_file: Optional[str] = None
    log_level: str = "INFO"


class FieldConfig(BaseModel):
    """A ``layout_fields`` row."""

    field_name: str
    field_source: Optional[str] = None
    field_size: int = Field(ge=1)
    order_position: int
    field_type: str = "text"
    fill_type: FillType = FillType.SPACES
    alignment: Alignment = Alignment.RIGHT
    date_format: str = "aaaammdd"
    decimal_places: int = Field(default=0, ge=0)
    default_value: Optional[str] = None
    format_pattern: Optional[str] = None
    is_aggregation_field: bool = False

    def to_descriptor(self) -> FieldDescriptor:
        return FieldDescriptor(
            name=self.field_name,
            source=self.field_source or "",
            size=self.field_size,
            order_position=self.order_position,
            fill_type=self.fill_type,
            alignment=self.alignment,
            date_format=self.date_format,
            decimal_places=self.decimal_places,
            default_value=self.default_value,
            format_pattern=self.format_pattern,
            field_type=self.field_type,
            is_aggregation_field=self.is_aggregation_field,
        )


class LayoutConfig(BaseModel):
    """An ``export_layouts`` row with its fields."""

    name: str
    description: Optional[str] = None
    field_separator: FieldSeparator = FieldSeparator.NONE
    decimal_separator: DecimalSeparator = DecimalSeparator.DOT
    report_type: ReportType = ReportType.ONE_EVENT_PER_LINE
    multiply_extra_factor: bool = False
    extra_factor: float = 1.5
    multiply_night_factor: bool = False
    night_factor: float = 1.2
    honor_alignment: bool = False
    header: Optional[str] = None
    footer: Optional[str] = None
    fields: List[FieldConfig] = Field(default_factory=list)

    def to_layout(self) -> Layout:
        positions = [item.order_position for item in self.fields]
        if len(positions) != len(set(positions)):
            raise ConfigError(f"Layout '{self.name}' possui posições de ordem repetidas.")
        return Layout(
            name=self.name,
            description=self.description,
            fields=recompute_positions([item.to_descriptor() for item in self.fields]),
            field_separator=self.field_separator,
            decimal_separator=self.decimal_separator,
            report_type=self.report_type,
            multiply_extra_factor=self.multiply_extra_factor,
            extra_factor=self.extra_factor,
            multiply_night_factor=self.multiply_night_factor,
            night_factor=self.night_factor,
            honor_alignment=self.honor_alignment,
            header=self.header,
            footer=self.footer,
        )


class BalanceConfig(BaseModel):
    bucket_table: str = "padrao"
    bucket_tables: Dict[str, Dict[str, List[str]]] = Field(default_factory=dict)

    def tables(self) -> Dict[str, BucketTable]:
        tables = dict(BUCKET_TABLES)
        for name, mapping in self.bucket_tables.items():
            try:
                tables[name] = BucketTable.from_mapping(name, mapping)
            except ValueError as exc:
                raise ConfigError(f"Tabela de eventos '{name}' inválida: {exc}") from exc
        return tables

    def table(self, name: Optional[str] = None) -> BucketTable:
        selected = name or self.bucket_table
        tables = self.tables()
        if selected not in tables:
            options = ", ".join(sorted(tables))
            raise ConfigError(f"Tabela de eventos desconhecida: {selected}. Opções: {options}.")
        return tables[selected]


class AppConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    balance: BalanceConfig = Field(default_factory=BalanceConfig)
    layouts: Dict[str, LayoutConfig] = Field(default_factory=dict)

    def layout(self, name: str) -> Layout:
        if name not in self.layouts:
            raise ConfigError(f"Layout não configurado: {name}.")
        return self.layouts[name].to_layout()


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"Não foi possível ler {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML inválido em {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"O arquivo {path} deve conter um mapeamento YAML.")
    return data


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load the application configuration; defaults apply without a file."""

    if path is None:
        return AppConfig()
    data = _read_yaml(path)
    layouts = data.get("layouts") or {}
    if not isinstance(layouts, dict):
        raise ConfigError(f"A seção 'layouts' de {path} deve ser um mapeamento por nome.")
    for name, layout in layouts.items():
        if isinstance(layout, dict):
            layout.setdefault("name", name)
    try:
        return AppConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Configuração inválida em {path}: {exc}") from exc


def load_layout(path: Path) -> Layout:
    """Load a single layout definition from a YAML file."""

    data = _read_yaml(path)
    data.setdefault("name", path.stem)
    try:
        return LayoutConfig(**data).to_layout()
    except ValidationError as exc:
        raise ConfigError(f"Layout inválido em {path}: {exc}") from exc


def setup_logging(settings: LoggingConfig) -> None:
    logger.remove()
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level)
    logger.add(sys.stderr, level=settings.log_level)
