"""Tests for bumpkit.tags."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from bumpkit.tags import latest_semver_tag, latest_tag, semver_tags

TAGS = "v1.0.0\nv1.10.0\nv1.2.0\nvnext\nv2.0.0-beta.1\nv2.0.0-alpha.4"


class TestSemverTags:
    """Tests for semver_tags()."""

    @patch("bumpkit.tags.git")
    def test_ignores_non_semver(self, mock_git: MagicMock) -> None:
        mock_git.return_value = TAGS

        tags = [tag for tag, _ in semver_tags("v")]

        assert "vnext" not in tags
        assert len(tags) == 5
        mock_git.assert_called_once_with(
            "tag", "--list", "v*", "--merged", "HEAD", check=False, cwd=None
        )


class TestLatestTag:
    """Tests for latest_tag()."""

    @patch("bumpkit.tags.git")
    def test_highest_by_precedence(self, mock_git: MagicMock) -> None:
        mock_git.return_value = TAGS
        assert latest_tag("v") == "v2.0.0-beta.1"

    @patch("bumpkit.tags.git")
    def test_none_without_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert latest_tag("v") is None


class TestLatestSemverTag:
    """Tests for latest_semver_tag()."""

    @patch("bumpkit.tags.git")
    def test_highest_version(self, mock_git: MagicMock) -> None:
        mock_git.return_value = TAGS
        assert latest_semver_tag("v") == "2.0.0-beta.1"

    @patch("bumpkit.tags.git")
    def test_filters_other_prerelease_lines(self, mock_git: MagicMock) -> None:
        mock_git.return_value = TAGS
        assert latest_semver_tag("v", "alpha") == "2.0.0-alpha.4"
        assert latest_semver_tag("v", "rc") == "1.10.0"

    @patch("bumpkit.tags.git")
    def test_custom_prefix(self, mock_git: MagicMock) -> None:
        mock_git.return_value = "release-3.0.0\nrelease-3.1.0"
        assert latest_semver_tag("release-") == "3.1.0"

    @patch("bumpkit.tags.git")
    def test_default_without_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert latest_semver_tag() == "1.0.0"
