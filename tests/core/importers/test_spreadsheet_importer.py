import pandas as pd
import pytest

from form_layout_toolkit.core.importers import (
    ColumnMapping,
    ImportPreview,
    LayoutImportError,
    SpreadsheetLayoutImporter,
    build_form_from_records,
    preview_stats,
    read_csv_records,
    read_excel_records,
    read_records,
    source_metadata,
)
from form_layout_toolkit.core.models import NodeVariant
from layout_factory import all_ids


def _record(tab, section, name, display_type="", width="", offset=""):
    return {
        "Tab Name": tab,
        "Section Name": section,
        "Field Design Name": name,
        "Display Type": display_type,
        "Width": width,
        "Offset": offset,
    }


@pytest.fixture
def records():
    return [
        _record("General", "Person", "First name", width="6"),
        _record("General", "Person", "Last name", width="6", offset="0"),
        _record("General", "Address", "Street"),
        _record("Billing", "Card", "Card number", width="4.0", offset="2"),
        _record("", "", "Notes"),
        _record("General", "Person", ""),  # no field name: skipped
        _record("Billing", "Card", "Items", display_type="subform"),
    ]


def test_groups_by_tab_then_section_in_first_seen_order(records, id_generator):
    form = build_form_from_records(records, form_name="Customer", generator=id_generator)

    assert form.name == "Customer"
    assert [t.name for t in form.tabs] == ["General", "Billing", "Default Tab"]
    general = form.tabs[0]
    assert [r.contents[0].name for r in general.rows] == ["Person", "Address"]
    person = general.rows[0].contents[0]
    # Each field on its own row
    assert [[c.name for c in r.contents] for r in person.rows] == [["First name"], ["Last name"]]
    assert form.tabs[2].rows[0].contents[0].name == "Default Section"


def test_grid_values_and_defaults(records, id_generator):
    form = build_form_from_records(records, default_width=3, default_offset=0, generator=id_generator)
    street = form.tabs[0].rows[1].contents[0].rows[0].contents[0]
    card = form.tabs[1].rows[0].contents[0].rows[0].contents[0]
    assert (street.width, street.offset) == (3, 0)
    assert (card.width, card.offset) == (4, 2)


def test_subform_type_and_unknown_types(records, id_generator):
    form = build_form_from_records(records, generator=id_generator)
    card_section = form.tabs[1].rows[0].contents[0]
    items = card_section.rows[1].contents[0]
    assert items.variant is NodeVariant.SUBFORM
    assert items.container is not None
    street = form.tabs[0].rows[1].contents[0].rows[0].contents[0]
    assert street.variant is NodeVariant.FIELD


def test_every_node_has_unique_id(records, id_generator):
    ids = all_ids(build_form_from_records(records, generator=id_generator))
    assert all(ids)
    assert len(set(ids)) == len(ids)


def test_blank_form_name_uses_fallback(id_generator):
    form = build_form_from_records([], form_name="  ", generator=id_generator)
    assert form.name == "IMPORTED_FORM"
    assert form.tabs == ()


def test_non_numeric_width_raises(id_generator):
    with pytest.raises(LayoutImportError, match="Record 1: column 'Width'"):
        build_form_from_records([_record("T", "S", "F", width="wide")], generator=id_generator)


@pytest.mark.parametrize("width", ["nan", "inf", float("nan")])
def test_non_finite_width_raises(width, id_generator):
    with pytest.raises(LayoutImportError, match="Record 1: column 'Width'"):
        build_form_from_records([_record("T", "S", "F", width=width)], generator=id_generator)


def test_custom_mapping(id_generator):
    mapping = ColumnMapping(tab_name="Page", section_name="Group", name="Label", type=None, width=None, offset=None)
    form = build_form_from_records(
        [{"Page": "P1", "Group": "G1", "Label": "Amount", "Width": "9"}],
        mapping=mapping,
        generator=id_generator,
    )
    field = form.tabs[0].rows[0].contents[0].rows[0].contents[0]
    assert field.name == "Amount"
    assert field.width == 3


def test_column_mapping_from_config_ignores_unknown_keys():
    mapping = ColumnMapping.from_config({"name": "Label", "colour": "Colour"})
    assert mapping.name == "Label"
    assert mapping.tab_name == "Tab Name"


def test_preview_stats(records):
    assert preview_stats(records) == ImportPreview(tabs=3, sections=4, fields=6)


def test_read_csv_records(tmp_path):
    path = tmp_path / "fields.csv"
    path.write_text(
        "\ufeffTab Name,Section Name,Field Design Name,Width\nMain,Info,Email,4\n",
        encoding="utf-8",
    )
    assert read_csv_records(path) == [
        {"Tab Name": "Main", "Section Name": "Info", "Field Design Name": "Email", "Width": "4"},
    ]


def test_read_csv_records_missing_file(tmp_path):
    with pytest.raises(LayoutImportError, match="Failed to read"):
        read_csv_records(tmp_path / "absent.csv")


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "onboarding.xlsx"
    pd.DataFrame([
        {"Tab Name": "Main", "Section Name": "Info", "Field Design Name": "Email", "Width": 4, "Offset": None},
        {"Tab Name": None, "Section Name": None, "Field Design Name": "Notes", "Width": None, "Offset": 1},
    ]).to_excel(path, index=False)
    return path


def test_read_excel_records_blank_cells_are_none(workbook):
    records = read_excel_records(workbook)

    assert [r["Field Design Name"] for r in records] == ["Email", "Notes"]
    assert records[0]["Offset"] is None
    assert records[1]["Tab Name"] is None
    assert records[1]["Width"] is None


def test_read_excel_records_corrupt_file(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a workbook")
    with pytest.raises(LayoutImportError, match="Failed to read") as excinfo:
        read_excel_records(path)
    assert excinfo.value.cause is not None


def test_read_records_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "fields.ods"
    path.write_bytes(b"")
    with pytest.raises(LayoutImportError, match="Unsupported spreadsheet format '.ods'"):
        read_records(path)


def test_source_metadata():
    meta = source_metadata("/data/onboarding.xlsx", "spreadsheet")
    assert meta["source_file"].endswith("onboarding.xlsx")
    assert meta["source_name"] == "onboarding"
    assert meta["source_type"] == "spreadsheet"
    assert meta["import_timestamp"]


class TestSpreadsheetLayoutImporter:
    def test_import_file_names_form_after_file(self, tmp_path, id_generator):
        path = tmp_path / "onboarding.csv"
        path.write_text(
            "Tab Name,Section Name,Field Design Name,Display Type,Width,Offset\n"
            "Main,Info,Email,FIELD,,\n",
            encoding="utf-8",
        )
        importer = SpreadsheetLayoutImporter(generator=id_generator)

        assert importer.can_import(path)
        form = importer.import_file(path)

        assert form.name == "onboarding"
        field = form.tabs[0].rows[0].contents[0].rows[0].contents[0]
        assert (field.name, field.width, field.offset) == ("Email", 3, 0)

    def test_import_workbook(self, workbook, id_generator):
        importer = SpreadsheetLayoutImporter(generator=id_generator)

        assert importer.can_import(workbook)
        form = importer.import_file(workbook)

        assert form.name == "onboarding"
        assert [t.name for t in form.tabs] == ["Main", "Default Tab"]
        email = form.tabs[0].rows[0].contents[0].rows[0].contents[0]
        notes = form.tabs[1].rows[0].contents[0].rows[0].contents[0]
        assert (email.width, email.offset) == (4, 0)
        assert (notes.width, notes.offset) == (3, 1)
        assert importer.source_metadata(workbook)["source_type"] == "spreadsheet"

    def test_settings_override_defaults(self, id_generator):
        settings = {
            "form_fallback_name": "FROM_SHEET",
            "spreadsheet": {"default_width": 5, "columns": {"name": "Label"}},
        }
        importer = SpreadsheetLayoutImporter(settings=settings, generator=id_generator)

        form = importer.build([{"Label": "Total"}])

        assert form.name == "FROM_SHEET"
        assert form.tabs[0].rows[0].contents[0].rows[0].contents[0].width == 5

    def test_user_config_columns(self, tmp_path, id_generator):
        user_dir = tmp_path / "user_config"
        user_dir.mkdir()
        (user_dir / "editor.yml").write_text(
            "import:\n  spreadsheet:\n    columns:\n      name: Label\n", encoding="utf-8",
        )
        importer = SpreadsheetLayoutImporter(generator=id_generator)
        assert importer.mapping.name == "Label"
        # Deep merge keeps the packaged columns that were not overridden
        assert importer.mapping.tab_name == "Tab Name"

    def test_preview(self, records):
        assert SpreadsheetLayoutImporter().preview(records).fields == 6

    def test_can_import_rejects_other_suffixes(self, tmp_path):
        path = tmp_path / "fields.txt"
        path.write_bytes(b"")
        assert not SpreadsheetLayoutImporter().can_import(path)
