"""Tests for grouping listed objects into pairs."""

from crawl_distiller.aggregators import classify_pairs, group_objects

from conftest import make_object


class TestGroupObjects:
    """Tests for group_objects."""

    def test_groups_by_domain_and_hash(self):
        """Objects sharing domain/hash form one pair."""
        pairs = group_objects([
            make_object("/ex.com/h1/page.html"),
            make_object("/ex.com/h1/metadata.json"),
            make_object("/ex.com/h2/page.html"),
        ])

        assert set(pairs) == {"ex.com/h1", "ex.com/h2"}
        assert pairs["ex.com/h1"].domain == "ex.com"
        assert pairs["ex.com/h1"].content_hash == "h1"
        assert len(pairs["ex.com/h1"].files) == 2

    def test_files_are_sorted_by_filename(self):
        """Member files are ordered by filename regardless of listing order."""
        pairs = group_objects([
            make_object("/ex.com/h1/page.html"),
            make_object("/ex.com/h1/metadata.json"),
        ])

        assert pairs["ex.com/h1"].filenames == ["metadata.json", "page.html"]

    def test_short_keys_are_dropped(self):
        """Keys with fewer than three segments are ignored."""
        pairs = group_objects([
            make_object("page.html"),
            make_object("/ex.com"),
            make_object("/ex.com/h1/page.html"),
        ])

        assert list(pairs) == ["ex.com/h1"]

    def test_three_segment_key_has_empty_filename(self):
        """A key with no filename segment still joins its pair."""
        pairs = group_objects([make_object("/ex.com/h1")])

        assert pairs["ex.com/h1"].filenames == [""]

    def test_keeps_listing_metadata(self):
        """Pair files carry size and last-modified from the listing."""
        obj = make_object("/ex.com/h1/page.html", size=512)

        pair_file = group_objects([obj])["ex.com/h1"].files[0]

        assert pair_file.key == obj.key
        assert pair_file.size == 512
        assert pair_file.last_modified == obj.last_modified


class TestClassifyPairs:
    """Tests for classify_pairs."""

    def _classify(self, keys):
        pairs = group_objects([make_object(k) for k in keys])
        return classify_pairs(pairs, "page.html", "metadata.json")

    def test_complete_pair(self):
        """HTML plus metadata is complete and not broken."""
        pair = self._classify(["/ex.com/h1/page.html", "/ex.com/h1/metadata.json"])["ex.com/h1"]

        assert pair.is_complete is True
        assert pair.is_broken is False

    def test_html_only_is_broken(self):
        """HTML without metadata is broken."""
        pair = self._classify(["/ex.com/h1/page.html"])["ex.com/h1"]

        assert pair.is_broken is True
        assert pair.is_complete is False

    def test_metadata_only_is_neither(self):
        """Metadata without HTML is neither complete nor broken."""
        pair = self._classify(["/ex.com/h1/metadata.json"])["ex.com/h1"]

        assert pair.is_broken is False
        assert pair.is_complete is False

    def test_uses_configured_filenames(self):
        """Classification matches the configured document names."""
        pairs = group_objects([
            make_object("/ex.com/h1/index.htm"),
            make_object("/ex.com/h1/meta.json"),
        ])

        classified = classify_pairs(pairs, "index.htm", "meta.json")

        assert classified["ex.com/h1"].is_complete is True
