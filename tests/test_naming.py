"""Unit tests for name derivation (libscaffold.naming).

Tests cover:
- String-case helpers
- Project name validation
- Scoped / unscoped NamingContext derivation
- Determinism of resolve_naming
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from libscaffold.errors import InvalidNameError
from libscaffold.naming import (
    DEFAULT_PREFIX,
    camelize,
    capitalize,
    classify,
    dasherize,
    decamelize,
    relative_path_to_root,
    resolve_naming,
    split_scoped_name,
    underscore,
    validate_project_name,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


class TestStringHelpers:
    def test_decamelize(self):
        assert decamelize("innerHTML") == "inner_html"
        assert decamelize("myLib") == "my_lib"

    def test_dasherize(self):
        assert dasherize("myLib") == "my-lib"
        assert dasherize("my lib") == "my-lib"
        assert dasherize("my_lib") == "my-lib"
        assert dasherize("widgets") == "widgets"

    def test_dasherize_keeps_scope_syntax(self):
        assert dasherize("@acme/widgets") == "@acme/widgets"

    def test_camelize(self):
        assert camelize("my-lib") == "myLib"
        assert camelize("my_lib name") == "myLibName"
        assert camelize("MyLib") == "myLib"

    def test_classify(self):
        assert classify("my-lib") == "MyLib"
        assert classify("widgets") == "Widgets"
        assert classify("some.thing-else") == "Some.ThingElse"

    def test_underscore(self):
        assert underscore("myLib") == "my_lib"
        assert underscore("my-lib") == "my_lib"

    def test_capitalize(self):
        assert capitalize("widgets") == "Widgets"
        assert capitalize("") == ""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestSplitScopedName:
    def test_scoped(self):
        assert split_scoped_name("@foo/bar") == ("foo", "bar")

    def test_unscoped(self):
        assert split_scoped_name("baz") == (None, "baz")


class TestValidateProjectName:
    @pytest.mark.parametrize("name", ["baz", "my-lib", "@foo/bar", "lib2", "@acme-corp/ng-utils"])
    def test_valid(self, name):
        assert validate_project_name(name) == name

    @pytest.mark.parametrize("name", [None, ""])
    def test_missing(self, name):
        with pytest.raises(InvalidNameError, match="required"):
            validate_project_name(name)

    @pytest.mark.parametrize("name", ["1lib", "my-1lib", "my--lib", "my lib", "-lib", "my.lib"])
    def test_malformed(self, name):
        with pytest.raises(InvalidNameError):
            validate_project_name(name)

    @pytest.mark.parametrize("name", ["foo/bar", "@foo/bar/baz", "a\\b"])
    def test_path_separators(self, name):
        with pytest.raises(InvalidNameError):
            validate_project_name(name)

    @pytest.mark.parametrize("name", ["test", "app", "vendor", "ember", "ember-cli", "@acme/app"])
    def test_reserved(self, name):
        with pytest.raises(InvalidNameError, match="not a supported name"):
            validate_project_name(name)

    def test_bad_scope(self):
        with pytest.raises(InvalidNameError, match="scope"):
            validate_project_name("@/widgets")

    @pytest.mark.parametrize("name", ["my.lib", "@acme/my.lib", "ng.utils"])
    def test_dotted_names_rejected(self, name):
        with pytest.raises(InvalidNameError, match="not a valid package name"):
            validate_project_name(name)

    def test_error_reports_position(self):
        with pytest.raises(InvalidNameError) as excinfo:
            validate_project_name("my-1lib")
        assert "character 2" in str(excinfo.value)


# ---------------------------------------------------------------------------
# NamingContext
# ---------------------------------------------------------------------------


class TestResolveNaming:
    def test_scoped_identifier(self):
        naming = resolve_naming("@foo/bar", "projects")
        assert naming.folder_name == "foo-bar"
        assert naming.project_root == "projects/foo-bar"
        assert naming.dist_root == "dist/foo-bar"
        assert naming.source_root == "projects/foo-bar/client/src"
        assert naming.source_dir == "projects/foo-bar/client/src/lib"
        assert naming.scope_name == "foo"
        assert naming.name == "bar"
        assert naming.project_name == "@foo/bar"
        assert naming.package_name == "@foo/bar"

    def test_unscoped_identifier(self):
        naming = resolve_naming("baz", "projects")
        assert naming.folder_name == "baz"
        assert naming.project_root == "projects/baz"
        assert naming.dist_root == "dist/baz"
        assert naming.scope_name is None
        assert naming.scope_prefix == ""

    def test_camel_case_names_are_dasherized(self):
        naming = resolve_naming("@myOrg/coolWidgets", "projects")
        assert naming.folder_name == "my-org-cool-widgets"
        assert naming.package_name == "@my-org/cool-widgets"

    def test_meteor_package_name(self):
        assert resolve_naming("@acme/widgets", "projects").meteor_package_name == "acme:widgets"
        assert resolve_naming("widgets", "projects").meteor_package_name == "widgets"

    def test_relative_root_path(self):
        assert resolve_naming("baz", "projects").relative_root_path == "../.."
        assert resolve_naming("baz", "libs/angular").relative_root_path == "../../.."

    def test_empty_new_project_root(self):
        naming = resolve_naming("baz", "")
        assert naming.project_root == "baz"
        assert naming.relative_root_path == ".."

    def test_prefix_default_and_override(self):
        assert resolve_naming("baz", "projects").prefix == DEFAULT_PREFIX
        assert resolve_naming("baz", "projects", prefix="acme").prefix == "acme"

    def test_deterministic(self):
        first = resolve_naming("@acme/widgets", "projects", "acme")
        second = resolve_naming("@acme/widgets", "projects", "acme")
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_frozen(self):
        naming = resolve_naming("baz", "projects")
        with pytest.raises(ValidationError):
            naming.folder_name = "other"

    def test_invalid_name_raises(self):
        with pytest.raises(InvalidNameError):
            resolve_naming("1bad", "projects")


class TestRelativePathToRoot:
    def test_counts_segments(self):
        assert relative_path_to_root("a/b/c") == "../../.."

    def test_ignores_empty_segments(self):
        assert relative_path_to_root("/a//b/") == "../.."
