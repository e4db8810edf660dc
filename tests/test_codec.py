from datetime import date

import pytest

from payroll_txt.codec import SourceKind, classify_source, render_field
from payroll_txt.models import Alignment, FieldDescriptor, FillType, Layout, LaunchRecord


def _record(**overrides):
    values = dict(
        employee_id="emp-1",
        launch_date=date(2025, 10, 4),
        event_code="HORA EXTRA 50%",
        event_description="Hora extra",
        employee_name="Maria Souza",
        employee_code="F001",
        company_payroll_number="7",
        payroll_number="42",
        quantity=8.75,
        unit_value=14.24,
        total_value=21.36,
    )
    values.update(overrides)
    return LaunchRecord(**values)


@pytest.mark.parametrize(
    "source, kind",
    [
        ("numero_folha_empresa", SourceKind.COMPANY_PAYROLL_NUMBER),
        ("company_payroll_number", SourceKind.COMPANY_PAYROLL_NUMBER),
        ("numero_folha", SourceKind.PAYROLL_NUMBER),
        ("numero_matricula", SourceKind.PAYROLL_NUMBER),
        ("nome_funcionario", SourceKind.EMPLOYEE_NAME),
        ("codigo_funcionario", SourceKind.EMPLOYEE_CODE),
        ("codigo_evento", SourceKind.EVENT_CODE),
        ("nome_evento", SourceKind.EVENT_NAME),
        ("data_evento", SourceKind.DATE),
        ("mes_referencia", SourceKind.DATE),
        ("ano_referencia", SourceKind.DATE),
        ("dias_faltados", SourceKind.DATE),
        ("valor_evento", SourceKind.AMOUNT),
        ("horas", SourceKind.DURATION),
        ("texto_fixo", SourceKind.STATIC),
        ("", SourceKind.STATIC),
        (None, SourceKind.STATIC),
    ],
)
def test_classify_source(source, kind):
    assert classify_source(source) is kind


def test_payroll_number_is_zero_filled():
    field = FieldDescriptor("Nº Folha", "numero_folha", 6, fill_type=FillType.ZEROS)
    assert render_field(field, _record(), Layout("Teste")).text == "000042"


def test_event_code_prefers_pinned_default():
    pinned = FieldDescriptor("Evento", "codigo_evento", 4, default_value="0013")
    free = FieldDescriptor("Evento", "codigo_evento", 4, fill_type=FillType.ZEROS)
    record = _record(event_code="15")

    assert render_field(pinned, record, Layout("Teste")).text == "0013"
    assert render_field(free, record, Layout("Teste")).text == "0015"


def test_date_with_slashes():
    field = FieldDescriptor("Data", "data_evento", 10, date_format="dd/mm/aaaa")
    assert render_field(field, _record(), Layout("Teste")).text == "04/10/2025"


def test_unknown_date_format_falls_back_to_compact():
    field = FieldDescriptor("Data", "data_evento", 8, date_format="???")
    assert render_field(field, _record(), Layout("Teste")).text == "20251004"


def test_missing_date_is_padded_and_reported():
    field = FieldDescriptor("Data", "data_evento", 8, fill_type=FillType.ZEROS)
    rendered = render_field(field, _record(launch_date=None), Layout("Teste"))

    assert rendered.text == "00000000"
    assert len(rendered.warnings) == 1


def test_value_with_extra_factor_and_decimals():
    layout = Layout("Teste", multiply_extra_factor=True, extra_factor=1.5)
    field = FieldDescriptor("Valor", "valor_evento", 8, fill_type=FillType.ZEROS, decimal_places=2)

    rendered = render_field(field, _record(), layout)

    assert rendered.text == "00003204"
    assert rendered.warnings == ()


def test_value_factors_compound_extra_then_night():
    layout = Layout(
        "Teste",
        multiply_extra_factor=True,
        extra_factor=1.5,
        multiply_night_factor=True,
        night_factor=1.2,
    )
    field = FieldDescriptor("Valor", "valor_evento", 6, fill_type=FillType.ZEROS, decimal_places=2)
    record = _record(event_code="EXTRA NOTURNO", total_value=10.0)

    assert render_field(field, record, layout).text == "001800"


def test_value_without_matching_marker_is_not_multiplied():
    layout = Layout("Teste", multiply_extra_factor=True, extra_factor=2.0)
    field = FieldDescriptor("Valor", "valor_evento", 6, fill_type=FillType.ZEROS, decimal_places=2)
    record = _record(event_code="SALARIO", total_value=10.5)

    assert render_field(field, record, layout).text == "001050"


def test_value_without_decimals_takes_the_floor():
    field = FieldDescriptor("Valor", "valor_evento", 4, fill_type=FillType.ZEROS)
    assert render_field(field, _record(total_value=99.99), Layout("Teste")).text == "0099"


def test_duration_is_truncated():
    field = FieldDescriptor("Horas", "horas", 4, fill_type=FillType.ZEROS)
    assert render_field(field, _record(quantity=8.75), Layout("Teste")).text == "0008"


def test_static_source_uses_value_then_default():
    field = FieldDescriptor("Fixo", "texto_fixo", 5, fill_type=FillType.DASH, default_value="AB")

    assert render_field(field, _record(), Layout("Teste")).text == "---AB"
    assert render_field(field, _record(), Layout("Teste"), value="XYZ").text == "--XYZ"


def test_oversized_content_is_cut_with_warning():
    field = FieldDescriptor("Nome", "nome_funcionario", 5)
    rendered = render_field(field, _record(), Layout("Teste"))

    assert rendered.text == "Maria"
    assert len(rendered.warnings) == 1
    assert "truncado" in rendered.warnings[0].message


def test_alignment_is_ignored_by_default():
    field = FieldDescriptor("Nome", "codigo_funcionario", 6, alignment=Alignment.LEFT)
    assert render_field(field, _record(), Layout("Teste")).text == "  F001"


def test_alignment_is_honored_when_enabled():
    field = FieldDescriptor("Nome", "codigo_funcionario", 6, alignment=Alignment.LEFT)
    layout = Layout("Teste", honor_alignment=True)
    assert render_field(field, _record(), layout).text == "F001  "


@pytest.mark.parametrize("size", [1, 3, 8, 20])
@pytest.mark.parametrize("source", ["nome_funcionario", "valor_evento", "data_evento", "horas", "texto_fixo"])
def test_rendered_width_always_matches_size(size, source):
    field = FieldDescriptor("Campo", source, size, decimal_places=2)
    first = render_field(field, _record(), Layout("Teste"))
    second = render_field(field, _record(), Layout("Teste"))

    assert len(first.text) == size
    assert first == second
