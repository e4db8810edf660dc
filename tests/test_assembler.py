from datetime import date

import pytest

from payroll_txt.assembler import EmptyResultSet, build_export, export_file_name, group_launches
from payroll_txt.layouts import preset_layout, recompute_positions
from payroll_txt.models import (
    DecimalSeparator,
    FieldDescriptor,
    FieldSeparator,
    FillType,
    Layout,
    LaunchRecord,
    ReportType,
)


def _launch(employee_id, day, total, *, code="0013", payroll="42", quantity=1.0):
    return LaunchRecord(
        employee_id=employee_id,
        launch_date=day,
        event_code=code,
        payroll_number=payroll,
        company_payroll_number="7",
        quantity=quantity,
        total_value=total,
    )


def _scenario_layout(**overrides):
    fields = recompute_positions(
        [
            FieldDescriptor("Nº Folha", "numero_folha", 6, 1, fill_type=FillType.ZEROS),
            FieldDescriptor("Código do Evento", "codigo_evento", 4, 2, default_value="0013"),
        ]
    )
    return Layout("Teste", fields=fields, **overrides)


def test_one_event_per_line():
    result = build_export(_scenario_layout(), [_launch("a", date(2025, 10, 4), 10.0)])

    assert result.lines == ("0000420013",)
    assert result.text == "0000420013"


def test_separator_between_fields_only():
    layout = _scenario_layout(field_separator=FieldSeparator.SEMICOLON)
    result = build_export(layout, [_launch("a", date(2025, 10, 4), 10.0)])

    assert result.text == "000042;0013"


def test_lines_are_ordered_by_employee_then_date():
    layout = Layout(
        "Datas",
        fields=recompute_positions(
            [
                FieldDescriptor("Folha", "numero_folha", 2, 1, fill_type=FillType.ZEROS),
                FieldDescriptor("Data", "data_evento", 8, 2),
            ]
        ),
    )
    launches = [
        _launch("b", date(2025, 10, 2), 1.0, payroll="2"),
        _launch("a", date(2025, 10, 3), 1.0, payroll="1"),
        _launch("a", date(2025, 10, 1), 1.0, payroll="1"),
    ]

    result = build_export(layout, launches)

    assert result.lines == ("0120251001", "0120251003", "0220251002")
    unsorted = build_export(layout, launches, sort=False)
    assert unsorted.lines[0] == "0220251002"


def test_period_filter_and_empty_result():
    launches = [_launch("a", date(2025, 9, 30), 1.0), _launch("a", date(2025, 10, 31), 1.0)]

    result = build_export(_scenario_layout(), launches, start=date(2025, 10, 1), end=date(2025, 10, 31))
    assert len(result.lines) == 1

    with pytest.raises(EmptyResultSet):
        build_export(_scenario_layout(), launches, start=date(2025, 11, 1), end=date(2025, 11, 30))
    with pytest.raises(EmptyResultSet):
        build_export(_scenario_layout(), [])


def test_one_employee_per_line_sums_value_parts():
    layout = preset_layout("Senior")
    layout = Layout(
        layout.name,
        fields=layout.fields,
        report_type=ReportType.ONE_EMPLOYEE_PER_LINE,
        multiply_extra_factor=True,
        extra_factor=1.5,
    )
    launches = [
        _launch("a", date(2025, 10, 4), 10.10, code="EXTRA", quantity=2),
        _launch("a", date(2025, 10, 5), 5.25, code="0020", quantity=3),
        _launch("b", date(2025, 10, 4), 1.0, payroll="7", quantity=1),
    ]

    result = build_export(layout, launches)

    # 10.10 * 1.5 + 5.25 = 20.40
    assert result.lines[0] == "000007" + "10" + "2025" + "000042" + "EXTR" + "0020" + "40" + "0002"
    assert result.lines[1] == "000007" + "10" + "2025" + "000007" + "0013" + "0001" + "00" + "0001"
    assert all(len(line) == layout.line_width for line in result.lines)
    assert [warning.line for warning in result.warnings] == [1]


def test_one_employee_per_line_total_uses_decimal_separator():
    fields = recompute_positions(
        [
            FieldDescriptor("Folha", "numero_folha", 3, 1, fill_type=FillType.ZEROS),
            FieldDescriptor("Valor Total", "valor_evento", 8, 2, fill_type=FillType.SPACES),
        ]
    )
    launches = [_launch("a", date(2025, 10, 4), 1.5), _launch("a", date(2025, 10, 5), 2.25)]

    comma = Layout("Total", fields=fields, report_type=ReportType.ONE_EMPLOYEE_PER_LINE,
                   decimal_separator=DecimalSeparator.COMMA)
    none = Layout("Total", fields=fields, report_type=ReportType.ONE_EMPLOYEE_PER_LINE,
                  decimal_separator=DecimalSeparator.NONE)

    assert build_export(comma, launches).text == "042    3,75"
    assert build_export(none, launches).text == "042     375"


def test_aggregation_field_splits_groups_per_period():
    fields = recompute_positions(
        [
            FieldDescriptor("Folha", "numero_folha", 2, 1, fill_type=FillType.ZEROS),
            FieldDescriptor("Mês", "mes_referencia", 2, 2, date_format="mm", is_aggregation_field=True),
            FieldDescriptor("Valor (Inteiro)", "valor_evento", 3, 3, fill_type=FillType.ZEROS),
        ]
    )
    layout = Layout("Mensal", fields=fields, report_type=ReportType.ONE_EMPLOYEE_PER_LINE)
    launches = [
        _launch("a", date(2025, 9, 10), 5.0),
        _launch("a", date(2025, 10, 10), 7.0),
        _launch("a", date(2025, 10, 11), 1.0),
    ]

    assert len(group_launches(layout, launches)) == 2
    assert build_export(layout, launches).lines == ("4209005", "4210008")


def test_truncation_is_reported_with_line_number():
    fields = recompute_positions([FieldDescriptor("Folha", "numero_folha", 2, 1)])
    launches = [_launch("a", date(2025, 10, 4), 1.0), _launch("b", date(2025, 10, 5), 1.0, payroll="12345")]

    result = build_export(Layout("Curto", fields=fields), launches)

    assert result.lines == ("42", "12")
    assert len(result.warnings) == 1
    assert result.warnings[0].line == 2


def test_export_file_name():
    layout = Layout("Senior")
    assert export_file_name(layout, date(2025, 10, 1), date(2025, 10, 31)) == "Senior_2025-10-01_2025-10-31.txt"


def _masked_layout(size, fill_type):
    fields = recompute_positions(
        [FieldDescriptor("Nº Folha", "numero_folha", size, 1, fill_type=fill_type, format_pattern="0000")]
    )
    return Layout("Máscara", fields=fields, report_type=ReportType.ONE_EMPLOYEE_PER_LINE)


def test_zero_mask_runs_after_space_fill():
    result = build_export(_masked_layout(6, FillType.SPACES), [_launch("a", date(2025, 10, 4), 1.0, payroll="12")])

    assert result.lines == ("    12",)
    assert result.warnings == ()


def test_zero_mask_longer_than_field_keeps_the_digits():
    result = build_export(_masked_layout(2, FillType.ZEROS), [_launch("a", date(2025, 10, 4), 1.0, payroll="12")])

    assert result.lines == ("12",)
    assert result.warnings == ()
