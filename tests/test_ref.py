"""Tests for ref parsing helpers."""

import pytest

from rallyrest.util import ref

UUID = "3493b049-3ea7-4c9a-bf78-069487936c13"
COMPACT_UUID = "3493b0493ea74c9abf78069487936c13"
PERMISSION_UUID = (
    "1637adf8-0830-4a48-9420-fb5bdb8575d6u3497d043-3ea7-4c2c-bf78-069847936c13w1"
)
BASE = "https://rally1.rallydev.com/slm/webservice"


class RefHolder:
    """Object exposing a _ref attribute, like a fetched record."""

    def __init__(self, value):
        self._ref = value


class TestIsRef:
    """Tests for ref.is_ref."""

    @pytest.mark.parametrize("value", [
        6786876,
        {},
        False,
        "yar",
        None,
        "/defect",
        f"{BASE}/1.32/defect/abc.js",
        "",
        {"_ref": None},
        "/defect/1234\n",
        "/defect/1234/tasks\n",
    ])
    def test_invalid_refs(self, value):
        """Test values that are not refs."""
        assert ref.is_ref(value) is False

    @pytest.mark.parametrize("value", [
        f"{BASE}/1.17/builddefinition/81177657",
        f"{BASE}/1.17/builddefinition/81177657.js",
        "/builddefinition/81177657.js",
        "/builddefinition/81177657",
        f"{BASE}/v3.0/builddefinition/{UUID}",
        f"{BASE}/v3.0/builddefinition/{COMPACT_UUID}",
        f"/builddefinition/{UUID}",
        f"/builddefinition/{COMPACT_UUID}",
    ])
    def test_basic_refs(self, value):
        """Test basic refs with numeric and uuid identities."""
        assert ref.is_ref(value) is True

    @pytest.mark.parametrize("value", [
        "/projectpermission/1234u5678p1",
        "/projectpermission/1234u5678p1.js",
        f"{BASE}/v2.0/projectpermission/1234u5678p1.js",
        "/workspacepermission/1234u5678w1",
        f"{BASE}/v2.0/workspacepermission/1234u5678w1.js",
        f"{BASE}/v3.0/workspacepermission/{PERMISSION_UUID}",
        f"/workspacepermission/{PERMISSION_UUID}",
    ])
    def test_permission_refs(self, value):
        """Test permission refs."""
        assert ref.is_ref(value) is True

    @pytest.mark.parametrize("value", [
        "/typedefinition/-1234.js",
        "/typedefinition/-1234",
        f"{BASE}/v2.0/typedefinition/-1234",
        "/typedefinition/-1234/attributes",
    ])
    def test_built_in_refs(self, value):
        """Test refs with negative identities."""
        assert ref.is_ref(value) is True

    def test_objects(self):
        """Test dicts and objects carrying a _ref."""
        assert ref.is_ref({"_ref": "/defect/12345"}) is True
        assert ref.is_ref({"_ref": f"{BASE}/v2.0/defect/12345"}) is True
        assert ref.is_ref({"_ref": f"/defect/{COMPACT_UUID}"}) is True
        assert ref.is_ref(RefHolder(f"{BASE}/v3.0/defect/{UUID}")) is True
        assert ref.is_ref(RefHolder(None)) is False

    @pytest.mark.parametrize("value", [
        "/portfolioitem/feature/1234",
        "/portfolioitem/feature/1234.js",
        f"{BASE}/1.32/portfolioitem/feature/1234",
        "http://rally1.rallydev.com/slm/webservice/1.32/portfolioitem/feature/1234.js",
        "/portfolioitem/feature/1234/children.js",
        f"{BASE}/v2.0/portfolioitem/feature/1234/children",
        f"{BASE}/v3.0/portfolioitem/feature/{UUID}/children",
        f"/portfolioitem/feature/{COMPACT_UUID}/children",
    ])
    def test_dynatype_refs(self, value):
        """Test two-segment type refs."""
        assert ref.is_ref(value) is True


class TestGetRelative:
    """Tests for ref.get_relative."""

    @pytest.mark.parametrize("value", ["blah", "", None, {}, {"_ref": None}, "/defect/1234\n"])
    def test_non_refs(self, value):
        """Test non-refs give None."""
        assert ref.get_relative(value) is None

    @pytest.mark.parametrize("value,expected", [
        ("/defect/1234", "/defect/1234"),
        ("/defect/1234.js", "/defect/1234"),
        (f"{BASE}/1.32/defect/1234", "/defect/1234"),
        (f"{BASE}/1.32/defect/1234.js", "/defect/1234"),
        (f"{BASE}/v2.0/defect/1234.js?fetch=Name", "/defect/1234"),
        (f"{BASE}/v3.0/defect/{UUID}.js", f"/defect/{UUID}"),
        (f"{BASE}/v3.0/defect/{COMPACT_UUID}", f"/defect/{COMPACT_UUID}"),
    ])
    def test_basic_refs(self, value, expected):
        """Test basic refs are normalized."""
        assert ref.get_relative(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("/portfolioitem/feature/1234", "/portfolioitem/feature/1234"),
        ("/portfolioitem/feature/1234.js", "/portfolioitem/feature/1234"),
        (f"{BASE}/v2.0/portfolioitem/feature/1234.js", "/portfolioitem/feature/1234"),
        (f"{BASE}/v3.0/portfolioitem/feature/{UUID}", f"/portfolioitem/feature/{UUID}"),
        ("/portfolioitem/feature/1234/children", "/portfolioitem/feature/1234/children"),
        ("/portfolioitem/feature/1234/children.js", "/portfolioitem/feature/1234/children"),
        (
            f"{BASE}/v3.0/portfolioitem/feature/{COMPACT_UUID}/children",
            f"/portfolioitem/feature/{COMPACT_UUID}/children",
        ),
    ])
    def test_dynatype_refs(self, value, expected):
        """Test dynatype and dynatype collection refs."""
        assert ref.get_relative(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("/defect/1234/tasks", "/defect/1234/tasks"),
        ("/defect/1234/tasks.js", "/defect/1234/tasks"),
        (f"{BASE}/v2.0/defect/1234/tasks.js", "/defect/1234/tasks"),
        (f"{BASE}/v3.0/defect/{UUID}/tasks", f"/defect/{UUID}/tasks"),
        ("/typedefinition/-1234/attributes.js", "/typedefinition/-1234/attributes"),
        (f"{BASE}/v2.0/typedefinition/-1234.js", "/typedefinition/-1234"),
    ])
    def test_collection_refs(self, value, expected):
        """Test collection and built-in refs."""
        assert ref.get_relative(value) == expected

    @pytest.mark.parametrize("version", ["v2.0", "1.43", "x", "v3.0"])
    def test_any_wsapi_version(self, version):
        """Test the webservice version segment is ignored."""
        assert ref.get_relative(f"{BASE}/{version}/defect/1234/tasks") == "/defect/1234/tasks"

    def test_undotted_wsapi_version(self):
        """Test a bare word version segment is read as part of a dynamic type."""
        assert ref.get_relative(f"{BASE}/v2/defect/1234") == "/v2/defect/1234"
        assert ref.get_type(f"{BASE}/v2/defect/1234") == "v2/defect"

    @pytest.mark.parametrize("value,expected", [
        ("/projectpermission/1234u5678p1.js", "/projectpermission/1234u5678p1"),
        (f"{BASE}/v2.0/workspacepermission/1234u5678w1.js", "/workspacepermission/1234u5678w1"),
        (f"{BASE}/v3.0/workspacepermission/{PERMISSION_UUID}", f"/workspacepermission/{PERMISSION_UUID}"),
    ])
    def test_permission_refs(self, value, expected):
        """Test permission refs."""
        assert ref.get_relative(value) == expected

    def test_relative_of_absolute_matches_relative(self):
        """Test absolute and relative forms normalize to the same ref."""
        for relative in ["/defect/1234", "/portfolioitem/feature/1234/children",
                         "/workspacepermission/1234u5678w1", "/defect/1234/tasks"]:
            assert ref.get_relative(f"{BASE}/v2.0{relative}") == ref.get_relative(relative) == relative

    def test_object(self):
        """Test refs are read from _ref."""
        assert ref.get_relative({"_ref": f"{BASE}/v2.0/defect/1234.js"}) == "/defect/1234"


class TestGetTypeAndId:
    """Tests for ref.get_type and ref.get_id."""

    @pytest.mark.parametrize("value", ["blah", "", None, {}, {"_ref": None}, "/defect/1234\n"])
    def test_non_refs(self, value):
        """Test non-refs give None."""
        assert ref.get_type(value) is None
        assert ref.get_id(value) is None

    @pytest.mark.parametrize("value,expected_type,expected_id", [
        ("/defect/1234", "defect", "1234"),
        (f"{BASE}/v2.0/defect/1234.js", "defect", "1234"),
        (f"/defect/{UUID}", "defect", UUID),
        (f"{BASE}/v3.0/defect/{COMPACT_UUID}", "defect", COMPACT_UUID),
        ("/portfolioitem/feature/1234", "portfolioitem/feature", "1234"),
        ("/portfolioitem/feature/1234/children", "portfolioitem/feature", "1234"),
        (f"{BASE}/v2.0/defect/1234/tasks.js", "defect", "1234"),
        ("/typedefinition/-1234", "typedefinition", "-1234"),
        ("/projectpermission/1234u5678p1", "projectpermission", "1234u5678p1"),
        (f"/workspacepermission/{PERMISSION_UUID}", "workspacepermission", PERMISSION_UUID),
    ])
    def test_refs(self, value, expected_type, expected_id):
        """Test type and identity segments."""
        assert ref.get_type(value) == expected_type
        assert ref.get_id(value) == expected_id
