"""Tests for deviceprivacy.scoring.taxonomy: token resolution."""

from __future__ import annotations

import pytest

from deviceprivacy.models import scoring
from deviceprivacy.scoring import taxonomy as taxonomy_mod


class TestResolve:
    """Tests for PermissionTaxonomy.resolve()."""

    def test_plist_key(self, taxonomy) -> None:
        definition = taxonomy.resolve("NSCameraUsageDescription")
        assert definition is not None
        assert definition.canonical_id == "camera"
        assert definition.base_weight == 25

    def test_dll_name(self, taxonomy) -> None:
        definition = taxonomy.resolve("advapi32.dll")
        assert definition is not None
        assert definition.canonical_id == "registry-access"
        assert definition.base_weight == 33

    def test_unknown_returns_none(self, taxonomy) -> None:
        assert taxonomy.resolve("NSNotARealUsageDescription") is None

    def test_exact_match_only(self, taxonomy) -> None:
        assert taxonomy.resolve("nscamerausagedescription") is None
        assert taxonomy.resolve("ADVAPI32.DLL") is None
        assert taxonomy.resolve(" NSCameraUsageDescription") is None

    def test_prefixed_tokens_are_distinct(self, taxonomy) -> None:
        assert taxonomy.resolve("capability:internetClient") is not None
        assert taxonomy.resolve("internetClient") is None
        assert taxonomy.resolve("device:internetClient") is None

    def test_aliases_collapse(self, taxonomy) -> None:
        ids = {
            taxonomy.resolve(token).canonical_id
            for token in (
                "NSPhotoLibraryUsageDescription",
                "NSPhotoLibraryAddUsageDescription",
                "uap:picturesLibrary",
                "entitlement:com.apple.security.personal-information.photos-library",
            )
        }
        assert ids == {"photo-library"}

    def test_contains_and_len(self, taxonomy) -> None:
        assert "wininet.dll" in taxonomy
        assert "nope.dll" not in taxonomy
        assert len(taxonomy) == len(taxonomy.tokens)


class TestBundledData:
    """Integrity checks over the shipped reference data."""

    def test_every_token_resolves(self, taxonomy) -> None:
        for token in taxonomy.tokens:
            assert taxonomy.resolve(token) is not None, token

    def test_reserved_ids_not_defined(self, taxonomy) -> None:
        assert scoring.NO_PERMISSIONS_ID not in taxonomy.definitions
        assert scoring.EXTRACTION_ERROR_ID not in taxonomy.definitions

    def test_weights_non_negative(self, taxonomy) -> None:
        assert all(d.base_weight >= 0 for d in taxonomy.definitions.values())

    def test_get_taxonomy_is_cached(self) -> None:
        assert taxonomy_mod.get_taxonomy() is taxonomy_mod.get_taxonomy()


class TestConstruction:
    """Tests for PermissionTaxonomy validation and immutability."""

    @staticmethod
    def _definition(canonical_id: str, weight: int = 10) -> scoring.PermissionDefinition:
        return scoring.PermissionDefinition(canonical_id=canonical_id, description=canonical_id, base_weight=weight)

    def test_dangling_token_rejected(self) -> None:
        with pytest.raises(ValueError, match="undefined"):
            taxonomy_mod.PermissionTaxonomy({"camera": self._definition("camera")}, {"tok": "missing"})

    def test_mismatched_key_rejected(self) -> None:
        with pytest.raises(ValueError, match="canonical id"):
            taxonomy_mod.PermissionTaxonomy({"camera": self._definition("microphone")}, {})

    def test_tables_are_read_only(self) -> None:
        table = taxonomy_mod.PermissionTaxonomy({"camera": self._definition("camera")}, {"tok": "camera"})
        with pytest.raises(TypeError):
            table.tokens["other"] = "camera"  # type: ignore[index]
        with pytest.raises(TypeError):
            table.definitions["x"] = self._definition("x")  # type: ignore[index]

    def test_source_mappings_copied(self) -> None:
        tokens = {"tok": "camera"}
        table = taxonomy_mod.PermissionTaxonomy({"camera": self._definition("camera")}, tokens)
        tokens["late"] = "camera"
        assert "late" not in table
