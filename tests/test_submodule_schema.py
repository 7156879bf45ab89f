import pytest

from path_classifier import PathEntry
from submodule_schema import (
    DataInvalid,
    parse_submodule,
    read_submodule_id,
    resolve_mod_name,
)
from tests.conftest import SUBMODULE_XML, p


# ── parsing ───────────────────────────────────────────────────────────────────

def test_parse_full_identity():
    identity = parse_submodule(SUBMODULE_XML.format(name="Better Armies", id="BetterArmies"))
    assert identity.id == "BetterArmies"
    assert identity.name == "Better Armies"
    assert identity.version == "v1.0.0"


def test_parse_id_only():
    identity = parse_submodule('<Module><Id value="Solo"/></Module>')
    assert identity.id == "Solo"
    assert identity.name is None
    assert identity.version is None


def test_parse_nested_id_is_found():
    text = "<Root><Module><Meta><Id value='Deep'/></Meta></Module></Root>"
    assert parse_submodule(text).id == "Deep"


def test_parse_first_id_wins():
    text = '<Module><Id value="First"/><Id value="Second"/></Module>'
    assert parse_submodule(text).id == "First"


@pytest.mark.parametrize("text", [
    "not xml at all",
    "<Module><Id value='x'></Module>",
    "",
])
def test_parse_malformed(text):
    with pytest.raises(DataInvalid, match="Failed to parse"):
        parse_submodule(text)


def test_parse_missing_id_element():
    with pytest.raises(DataInvalid, match="Unexpected"):
        parse_submodule('<Module><Name value="No id"/></Module>')


def test_parse_id_without_value():
    with pytest.raises(DataInvalid):
        parse_submodule("<Module><Id/></Module>")


def test_parse_empty_id_value():
    with pytest.raises(DataInvalid):
        parse_submodule('<Module><Id value="  "/></Module>')


def test_data_invalid_is_value_error():
    assert issubclass(DataInvalid, ValueError)


# ── reading ───────────────────────────────────────────────────────────────────

def test_read_submodule_id(tmp_path):
    path = tmp_path / "SubModule.xml"
    path.write_text(SUBMODULE_XML.format(name="A", id="ModA"), encoding="utf-8")
    assert read_submodule_id(path) == "ModA"


def test_read_submodule_id_with_bom(tmp_path):
    path = tmp_path / "SubModule.xml"
    path.write_bytes(b"\xef\xbb\xbf" + b'<Module><Id value="Bom"/></Module>')
    assert read_submodule_id(path) == "Bom"


def test_read_submodule_id_utf16(tmp_path):
    path = tmp_path / "SubModule.xml"
    text = '<?xml version="1.0" encoding="utf-16"?>\n<Module><Name value="Café"/><Id value="Wide"/></Module>'
    path.write_bytes(text.encode("utf-16"))
    assert read_submodule_id(path) == "Wide"


def test_read_submodule_id_latin1_declared(tmp_path):
    path = tmp_path / "SubModule.xml"
    text = '<?xml version="1.0" encoding="iso-8859-1"?>\n<Module><Name value="Café"/><Id value="Cafe"/></Module>'
    path.write_bytes(text.encode("iso-8859-1"))
    assert read_submodule_id(path) == "Cafe"


def test_read_submodule_id_latin1_undeclared_is_data_invalid(tmp_path):
    path = tmp_path / "SubModule.xml"
    path.write_bytes('<Module><Name value="Café"/><Id value="Cafe"/></Module>'.encode("iso-8859-1"))
    with pytest.raises(DataInvalid):
        read_submodule_id(path)


def test_parse_unknown_declared_encoding_is_data_invalid():
    with pytest.raises(DataInvalid):
        parse_submodule(b'<?xml version="1.0" encoding="no-such-codec"?><Module><Id value="x"/></Module>')


def test_read_missing_file_is_os_error(tmp_path):
    with pytest.raises(OSError):
        read_submodule_id(tmp_path / "SubModule.xml")


# ── name resolution ───────────────────────────────────────────────────────────

def test_resolve_from_folder_name_does_no_io(tmp_path):
    entry = PathEntry.of(p("Modules", "MyMod", "SubModule.xml"))
    # Nothing exists on disk; the folder name is enough.
    resolution = resolve_mod_name(entry, tmp_path)
    assert resolution.source == "path"
    assert resolution.ok
    assert resolution.unwrap() == "MyMod"


def test_resolve_from_identity_file(staging):
    (staging / "SubModule.xml").write_text('<Module><Id value="RootMod"/></Module>', encoding="utf-8")
    resolution = resolve_mod_name(PathEntry.of("SubModule.xml"), staging)
    assert resolution.source == "identity"
    assert resolution.unwrap() == "RootMod"


def test_resolve_leading_separator_counts_as_root(staging):
    (staging / "SubModule.xml").write_text('<Module><Id value="Lead"/></Module>', encoding="utf-8")
    entry = PathEntry.of(p("", "SubModule.xml"))
    resolution = resolve_mod_name(entry, staging)
    assert resolution.source == "identity"


def test_resolve_identity_failure_is_carried(staging):
    (staging / "SubModule.xml").write_text("<<broken", encoding="utf-8")
    resolution = resolve_mod_name(PathEntry.of("SubModule.xml"), staging)
    assert not resolution.ok
    assert resolution.name is None
    assert isinstance(resolution.error, DataInvalid)
    with pytest.raises(DataInvalid):
        resolution.unwrap()
