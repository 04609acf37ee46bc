"""Tests for requirements.txt rewriting."""

from depbump.python.requirement_replacer import RequirementReplacer


def replace(content, name, old, new, new_hashes=None):
    return RequirementReplacer(content, name, old, new, new_hashes=new_hashes).updated_content()


class TestRequirementReplacer:
    """Test replacement of a single requirement."""

    def test_replace_single_requirement(self):
        """Should rewrite only the matching requirement."""
        content = "psycopg2==2.6.1\nrequests==2.18.0\n"
        updated = replace(content, "psycopg2", "==2.6.1", "==2.8.1")
        assert updated == "psycopg2==2.8.1\nrequests==2.18.0\n"

    def test_preserves_comments_and_markers(self):
        """Should keep environment markers and trailing comments."""
        content = 'uvloop>=0.17.0; sys_platform != "win32"  # fast loop\n'
        updated = replace(content, "uvloop", ">=0.17.0", ">=0.18.0")
        assert updated == 'uvloop>=0.18.0; sys_platform != "win32"  # fast loop\n'

    def test_preserves_extras(self):
        """Should keep extras on the requirement."""
        updated = replace("fastapi[all]==0.85.0\n", "fastapi", "==0.85.0", "==0.86.0")
        assert updated == "fastapi[all]==0.86.0\n"

    def test_preserves_spacing(self):
        """Should keep the file's spacing around operators and commas."""
        content = "django >= 3.2, < 4.0\n"
        updated = replace(content, "django", ">=3.2,<4.0", ">=4.2,<5.0")
        assert updated == "django >= 4.2, < 5.0\n"

    def test_matches_normalized_names(self):
        """Should match names regardless of case and separators."""
        updated = replace("Django_Extensions==1.0\n", "django-extensions", "==1.0", "==2.0")
        assert updated == "Django_Extensions==2.0\n"

    def test_requires_the_old_requirement(self):
        """Should leave a declaration with a different requirement alone."""
        content = "requests>=2.0\n"
        assert replace(content, "requests", "==2.18.0", "==2.18.4") == content

    def test_skips_non_registry_lines(self):
        """Should ignore comments, editables, URLs and include lines."""
        content = (
            "# requests==2.18.0\n"
            "-e git+https://github.com/psf/requests.git#egg=requests\n"
            "-r requirements/base.txt\n"
            "requests==2.18.0\n"
        )
        updated = replace(content, "requests", "==2.18.0", "==2.18.4")
        assert updated.splitlines()[0] == "# requests==2.18.0"
        assert updated.splitlines()[-1] == "requests==2.18.4"

    def test_replaces_continuation_hashes(self):
        """Should replace hash continuation lines with the new digests."""
        content = (
            "requests==2.18.0 \\\n"
            "    --hash=sha256:aaa \\\n"
            "    --hash=sha256:bbb\n"
            "    # via -r requirements.in\n"
            "urllib3==1.22\n"
        )
        updated = replace(content, "requests", "==2.18.0", "==2.18.4", new_hashes=["ccc", "ddd"])
        assert updated == (
            "requests==2.18.4 \\\n"
            "    --hash=sha256:ccc \\\n"
            "    --hash=sha256:ddd\n"
            "    # via -r requirements.in\n"
            "urllib3==1.22\n"
        )

    def test_replaces_inline_hashes(self):
        """Should replace hashes given on the requirement line."""
        content = "requests==2.18.0 --hash=sha256:aaa\n"
        updated = replace(content, "requests", "==2.18.0", "==2.18.4", new_hashes=["ccc"])
        assert updated == "requests==2.18.4 --hash=sha256:ccc\n"

    def test_keeps_hashes_without_new_digests(self):
        """Should leave hashes alone when no new digests are given."""
        content = "requests==2.18.0 \\\n    --hash=sha256:aaa\n"
        updated = replace(content, "requests", "==2.18.0", "==2.18.4")
        assert updated == "requests==2.18.4 \\\n    --hash=sha256:aaa\n"
