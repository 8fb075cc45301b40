# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for module usage detection over archives and directories."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from bootrun.analysis import ArchiveContents, ModuleUsageSet, UsageAnalyzer, detect_used_modules, open_contents
from bootrun.catalog import ModuleCatalog, load_catalog
from bootrun.errors import AnalysisError

REST_CLASS = b"\xca\xfe\xba\xbe....Ljavax/ws/rs/Path;....Ljavax/ws/rs/GET;"
PLAIN_CLASS = b"\xca\xfe\xba\xbe....Ljava/lang/Object;"


def _names(usage: ModuleUsageSet) -> list[str]:
    return [descriptor.name for descriptor in usage]


def test_package_reference_in_class_file(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.jar", {"com/acme/Api.class": REST_CLASS})
    usage = UsageAnalyzer(web_catalog).detect(archive)
    assert _names(usage) == ["rest"]


def test_resource_marker_in_war(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.war", {"WEB-INF/web.xml": b"<web-app/>", "index.html": b"<html/>"})
    usage = detect_used_modules(web_catalog, archive)
    assert _names(usage) == ["web"]
    assert usage.labels == ("web:1.0",)


def test_package_text_outside_class_files_is_ignored(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.jar", {"README.txt": b"uses javax/ws/rs/ for REST"})
    assert len(UsageAnalyzer(web_catalog).detect(archive)) == 0


def test_no_matches_is_empty_set(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.jar", {"com/acme/Main.class": PLAIN_CLASS})
    usage = UsageAnalyzer(web_catalog).detect(archive)
    assert usage == ModuleUsageSet()
    assert not usage


def test_nested_library_archives_are_scanned(web_catalog: ModuleCatalog, make_archive) -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as nested:
        nested.writestr("org/lib/Client.class", REST_CLASS)
    archive = make_archive("app.war", {"WEB-INF/lib/client.jar": buffer.getvalue()})

    entries = [entry.name for entry in ArchiveContents(archive).entries()]
    assert "WEB-INF/lib/client.jar!/org/lib/Client.class" in entries
    assert _names(UsageAnalyzer(web_catalog).detect(archive)) == ["rest"]


def test_exploded_directory(web_catalog: ModuleCatalog, tmp_path: Path) -> None:
    classes = tmp_path / "classes"
    (classes / "com" / "acme").mkdir(parents=True)
    (classes / "com" / "acme" / "Api.class").write_bytes(REST_CLASS)
    (classes / "WEB-INF").mkdir()
    (classes / "WEB-INF" / "web.xml").write_bytes(b"<web-app/>")

    usage = UsageAnalyzer(web_catalog).detect(classes)
    assert _names(usage) == ["rest", "web"]


def test_packaged_catalog_detects_cdi_and_jaxrs(make_archive) -> None:
    archive = make_archive(
        "app.war",
        {
            "WEB-INF/classes/com/acme/Api.class": REST_CLASS,
            "WEB-INF/beans.xml": b"<beans/>",
        },
    )
    usage = UsageAnalyzer(load_catalog()).detect(archive)
    assert {"cdi", "jaxrs"} <= set(_names(usage))


def test_detection_is_deterministic(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.war", {"WEB-INF/web.xml": b"", "com/acme/Api.class": REST_CLASS})
    analyzer = UsageAnalyzer(web_catalog)
    assert analyzer.detect(archive) == analyzer.detect(archive)


def test_missing_artifact_is_analysis_error(web_catalog: ModuleCatalog, tmp_path: Path) -> None:
    with pytest.raises(AnalysisError, match="not found"):
        UsageAnalyzer(web_catalog).detect(tmp_path / "missing.war")


def test_corrupt_archive_is_analysis_error(web_catalog: ModuleCatalog, tmp_path: Path) -> None:
    bogus = tmp_path / "broken.jar"
    bogus.write_bytes(b"definitely not a zip file")
    with pytest.raises(AnalysisError):
        open_contents(bogus)


def test_corrupt_nested_archive_is_analysis_error(web_catalog: ModuleCatalog, make_archive) -> None:
    archive = make_archive("app.war", {"WEB-INF/lib/broken.jar": b"garbage"})
    with pytest.raises(AnalysisError):
        UsageAnalyzer(web_catalog).detect(archive)
