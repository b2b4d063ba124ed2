#!/usr/bin/env python3
"""
Tests for Member Synthesis

Effective member set of a record: one synthesized accessor per primary
member unless a user declaration with the same name replaces it.
"""

import types

import pytest

from recmatch.passes.member_synthesis import synthesize, synthesize_display
from recmatch.shared.errors import DuplicatePrimaryMemberError, MutablePrimaryMemberError
from recmatch.shared.members import Origin, SynthesizedMember, UserProvidedMember
from recmatch.shared.nodes import MemberKind, PrimaryMember, RecordDeclaration
from recmatch.shared.types import INT, STR
from tests.test_utils import user_method, user_property


def _point():
    return RecordDeclaration.of("Point", [("x", INT), ("y", INT)])


def _stored(*values):
    return types.SimpleNamespace(storage=tuple(values))


class TestSynthesize:

    def test_one_accessor_per_primary_member(self):
        effective = synthesize(_point().primary_members, ())
        assert sorted(effective) == ["x", "y"]
        assert all(isinstance(m, SynthesizedMember) for m in effective.values())
        assert all(m.origin is Origin.SYNTHESIZED for m in effective.values())
        assert all(m.kind is MemberKind.PROPERTY for m in effective.values())

    def test_accessor_reads_constructor_value(self):
        effective = synthesize(_point().primary_members, ())
        subject = _stored(3, 4)
        assert effective["x"].read(subject) == 3
        assert effective["y"].read(subject) == 4
        assert effective["y"].value_type == INT

    def test_user_declaration_replaces_only_its_name(self):
        override = user_property("x", body=lambda inst: 100)
        effective = synthesize(_point().primary_members, (override,))

        assert isinstance(effective["x"], UserProvidedMember)
        assert effective["x"].origin is Origin.USER_PROVIDED
        assert effective["x"].shadows.name == "x"
        assert isinstance(effective["y"], SynthesizedMember)
        assert effective["x"].read(_stored(1, 2)) == 100

    def test_bodiless_redeclaration_reads_stored_value(self):
        effective = synthesize(_point().primary_members, (user_property("y"),))
        assert isinstance(effective["y"], UserProvidedMember)
        assert effective["y"].read(_stored(1, 2)) == 2

    def test_extra_user_members_are_added(self):
        area = user_method("Area", lambda inst: 0)
        effective = synthesize(_point().primary_members, (area,))
        assert set(effective) == {"x", "y", "Area"}
        assert effective["Area"].shadows is None

    def test_distinct_name_count(self):
        user = (user_property("x"), user_method("Norm", lambda inst: 0), user_method("Norm", lambda inst: 1))
        effective = synthesize(_point().primary_members, user)
        # overloads sharing a name group into one effective member
        assert len(effective) == 3
        assert len(effective["Norm"].declarations) == 2

    def test_empty_record(self):
        assert synthesize((), ()) == {}

    def test_duplicate_primary_member_rejected(self):
        primary = (PrimaryMember("x", INT, 0), PrimaryMember("x", STR, 1))
        with pytest.raises(DuplicatePrimaryMemberError) as exc_info:
            synthesize(primary, ())
        assert exc_info.value.member_name == "x"
        assert exc_info.value.error_code == "E0101"

    def test_mutable_primary_member_rejected(self):
        primary = (PrimaryMember("x", INT, 0), PrimaryMember("y", INT, 1, mutable=True))
        with pytest.raises(MutablePrimaryMemberError) as exc_info:
            synthesize(primary, ())
        assert exc_info.value.member_name == "y"


class TestSynthesizeDisplay:

    def test_display_lists_members_in_order(self):
        declaration = RecordDeclaration.of("Point", [("x", INT), ("name", STR)])
        effective = synthesize(declaration.primary_members, ())
        display = synthesize_display("Point", effective, declaration.primary_members)
        assert display(_stored(1, "a")) == "Point(x: 1, name: a)"

    def test_display_of_null_and_bool_members(self):
        declaration = RecordDeclaration.of("Flag", [("on", INT), ("other", INT)])
        effective = synthesize(declaration.primary_members, ())
        display = synthesize_display("Flag", effective, declaration.primary_members)
        assert display(_stored(True, None)) == "Flag(on: true, other: null)"

    def test_user_to_string_wins(self):
        declaration = _point()
        to_string = user_method("ToString", lambda inst: "<point>")
        effective = synthesize(declaration.primary_members, (to_string,))
        display = synthesize_display("Point", effective, declaration.primary_members)
        assert display(_stored(1, 2)) == "<point>"


class TestMemberSynthesisPass:

    def test_pass_reports_errors_per_record(self, compiler):
        from recmatch.shared.nodes import Program

        bad = RecordDeclaration("Bad", (PrimaryMember("a", INT, 0), PrimaryMember("a", INT, 1)))
        good = _point()
        result = compiler.analyze(Program.of_records([bad, good]))

        assert not result.success
        assert result.error_codes() == ["E0101"]
        assert "in record `Bad`" in result.get_errors()[0]
        assert result.tcx.lookup_record("Point").members
