"""Layout editing operations and the predefined field catalog."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from .models import FieldDescriptor, FillType, Layout, LayoutValidationError

# source -> (label, default size), as offered by the layout editor.
PREDEFINED_FIELDS: Dict[str, Tuple[str, int]] = {
    "numero_sequencial": ("Número sequencial", 6),
    "dia_inicial": ("Dia inicial", 2),
    "texto_fixo": ("Texto fixo", 10),
    "dia_final": ("Dia final", 2),
    "valor_evento": ("Valor do evento", 10),
    "nome_evento": ("Nome do evento", 30),
    "codigo_evento": ("Código do evento", 4),
    "data_evento": ("Data do evento", 10),
    "dias_faltados": ("Dias faltados", 2),
    "id_empresa": ("ID da empresa", 10),
    "nome_empresa": ("Nome da empresa", 50),
    "nome_fantasia_empresa": ("Nome Fantasia da Empresa", 50),
    "numero_folha_empresa": ("Número da Folha (empresa)", 6),
    "cnpj_empresa": ("CNPJ da empresa", 14),
    "inscricao_estadual_empresa": ("Inscrição Estadual da empresa", 20),
    "id_centro_custo": ("ID do centro de custo", 10),
    "nome_centro_custo": ("Nome do centro de custo", 30),
    "id_departamento": ("ID do departamento", 10),
    "nome_departamento": ("Nome do departamento", 30),
    "id_funcionario": ("ID do funcionário", 10),
    "nome_funcionario": ("Nome do funcionário", 50),
    "cpf_funcionario": ("CPF do funcionário", 11),
    "numero_folha": ("Número da Folha", 6),
    "mes_referencia": ("Mês de referência", 2),
    "ano_referencia": ("Ano de referência", 4),
}

PRESET_NAMES = (
    "Alterdata",
    "DOMINIO POLIANA",
    "Layout Padrão",
    "Metadados",
    "Microsiga",
    "RM Folha",
    "Senior",
    "Totvs",
    "Questor",
)


def recompute_positions(fields: Sequence[FieldDescriptor]) -> Tuple[FieldDescriptor, ...]:
    """Renumber fields 1..n and lay their columns out contiguously."""

    ordered = sorted(fields, key=lambda item: item.order_position)
    result: List[FieldDescriptor] = []
    start = 1
    for index, descriptor in enumerate(ordered, start=1):
        result.append(
            replace(
                descriptor,
                order_position=index,
                start_position=start,
                end_position=start + descriptor.size - 1,
            )
        )
        start += descriptor.size
    return tuple(result)


def validate_layout(layout: Layout) -> None:
    """Check order uniqueness and column contiguity of ``layout``."""

    seen = set()
    for descriptor in layout.fields:
        if descriptor.order_position in seen:
            raise LayoutValidationError(
                f"Posição de ordem {descriptor.order_position} repetida no layout '{layout.name}'."
            )
        seen.add(descriptor.order_position)

    expected_start = 1
    for index, descriptor in enumerate(layout.ordered_fields(), start=1):
        if descriptor.order_position != index:
            raise LayoutValidationError(
                f"Ordem dos campos do layout '{layout.name}' possui lacunas."
            )
        if descriptor.start_position != expected_start:
            raise LayoutValidationError(
                f"Campo '{descriptor.name}' deveria iniciar na coluna {expected_start}."
            )
        if descriptor.end_position != descriptor.start_position + descriptor.size - 1:
            raise LayoutValidationError(
                f"Campo '{descriptor.name}' com posição final inconsistente."
            )
        expected_start = descriptor.end_position + 1


def _index_of(fields: Sequence[FieldDescriptor], order_position: int) -> int:
    for index, descriptor in enumerate(fields):
        if descriptor.order_position == order_position:
            return index
    raise LayoutValidationError(f"Nenhum campo na posição {order_position}.")


def add_field(
    layout: Layout,
    descriptor: FieldDescriptor,
    position: Optional[int] = None,
) -> Layout:
    """Insert ``descriptor`` at ``position`` (1-based), or append it."""

    fields = list(layout.ordered_fields())
    if position is None:
        fields.append(descriptor)
    else:
        if not 1 <= position <= len(fields) + 1:
            raise LayoutValidationError(f"Posição inválida: {position}.")
        fields.insert(position - 1, descriptor)
    renumbered = [replace(item, order_position=index) for index, item in enumerate(fields, start=1)]
    return replace(layout, fields=recompute_positions(renumbered))


def remove_field(layout: Layout, order_position: int) -> Layout:
    fields = list(layout.ordered_fields())
    del fields[_index_of(fields, order_position)]
    return replace(layout, fields=recompute_positions(fields))


def move_field(layout: Layout, order_position: int, new_position: int) -> Layout:
    fields = list(layout.ordered_fields())
    if not 1 <= new_position <= len(fields):
        raise LayoutValidationError(f"Posição inválida: {new_position}.")
    descriptor = fields.pop(_index_of(fields, order_position))
    fields.insert(new_position - 1, descriptor)
    renumbered = [replace(item, order_position=index) for index, item in enumerate(fields, start=1)]
    return replace(layout, fields=recompute_positions(renumbered))


def resize_field(layout: Layout, order_position: int, size: int) -> Layout:
    """Change one field's size and shift every following field."""

    fields = list(layout.ordered_fields())
    index = _index_of(fields, order_position)
    fields[index] = replace(fields[index], size=size)
    return replace(layout, fields=recompute_positions(fields))


def new_field(source: str, **overrides) -> FieldDescriptor:
    """Build a descriptor for one of the predefined sources."""

    try:
        label, size = PREDEFINED_FIELDS[source]
    except KeyError as exc:
        raise LayoutValidationError(f"Campo pré-definido desconhecido: {source}.") from exc
    values = {"name": label, "source": source, "size": size}
    values.update(overrides)
    return FieldDescriptor(**values)


def _preset_fields() -> List[FieldDescriptor]:
    zeros = FillType.ZEROS
    return [
        FieldDescriptor("Nº Folha da Empresa", "numero_folha_empresa", 6, 1, fill_type=zeros,
                        default_value="000000", format_pattern="000000"),
        FieldDescriptor("Data Fim (Mês)", "mes_referencia", 2, 2, fill_type=zeros,
                        date_format="mm", format_pattern="MM"),
        FieldDescriptor("Data Fim (Ano)", "ano_referencia", 4, 3, fill_type=zeros,
                        date_format="aaaa", format_pattern="yyyy"),
        FieldDescriptor("Nº Folha", "numero_folha", 6, 4, fill_type=zeros,
                        default_value="000000", format_pattern="000000"),
        FieldDescriptor("Código do Evento", "codigo_evento", 4, 5, fill_type=zeros,
                        format_pattern="0000"),
        FieldDescriptor("Valor (Inteiro)", "valor_evento", 4, 6, fill_type=zeros,
                        default_value="0000", format_pattern="0000"),
        FieldDescriptor("Valor (Decimal)", "valor_evento", 2, 7, fill_type=zeros,
                        default_value="00", format_pattern="00"),
        FieldDescriptor("Horas (Inteiro)", "horas", 4, 8, fill_type=zeros,
                        default_value="0000", format_pattern="0000"),
    ]


def preset_layout(name: str) -> Layout:
    """Build one of the vendor presets with the common payroll fields."""

    if name not in PRESET_NAMES:
        raise LayoutValidationError(f"Layout pré-definido desconhecido: {name}.")
    return Layout(
        name=name,
        description=f"Layout de exportação {name}",
        fields=recompute_positions(_preset_fields()),
    )
