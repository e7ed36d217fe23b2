"""Unit tests for content hashing, signatures and text similarity."""

import pytest

from payguard.config import Config
from payguard.dedup import ContentHasher, MessageSignature, SignatureExtractor, SimilarityScorer, hash_message_content

pytestmark = [pytest.mark.unit, pytest.mark.dedup]


class TestContentHasher:
    """Test hashing of normalized content."""

    def test_case_and_whitespace_insensitive(self):
        hasher = ContentHasher()
        a = hasher.hash("Confirmed.  KES 5,000\nfrom John")
        b = hasher.hash("  confirmed. kes 5,000 from JOHN ")
        assert a == b

    def test_different_content_different_hash(self):
        assert hash_message_content("KES 5,000") != hash_message_content("KES 5,001")

    def test_hash_is_hex_sha256(self):
        digest = hash_message_content("anything")
        assert len(digest) == 64
        int(digest, 16)

    def test_normalize(self):
        assert ContentHasher.normalize(" A\t B ") == "a b"
        assert ContentHasher.normalize("") == ""


class TestSignatureExtractor:
    """Test token extraction used for similarity checks."""

    def test_extracts_all_token_kinds(self, sample_text):
        signature = SignatureExtractor().extract(sample_text)
        assert signature.amounts == frozenset({5000.0})
        assert signature.references == frozenset({"QAB123ABC"})
        assert signature.phones == frozenset({"0712345678"})

    def test_plain_words_are_not_references(self):
        signature = SignatureExtractor().extract("CONFIRMED RECEIVED PAYMENT")
        assert signature.references == frozenset()

    def test_empty_text(self):
        assert SignatureExtractor().extract("").is_empty()


class TestSimilarityScorer:
    """Test normalized edit-distance similarity."""

    @pytest.fixture
    def scorer(self, config):
        return SimilarityScorer(config)

    def test_identical_after_normalization(self, scorer):
        assert scorer.compare("KES 500 Received", "kes 500   received") == 1.0

    def test_completely_different(self, scorer):
        assert scorer.compare("aaaa", "bbbb") == 0.0

    def test_one_edit(self, scorer):
        assert scorer.compare("abcd", "abce") == pytest.approx(0.75)

    def test_empty_strings(self, scorer):
        assert scorer.compare("", "") == 1.0
        assert scorer.compare("abc", "") == 0.0

    def test_symmetric(self, scorer, sample_text, clean_text):
        assert scorer.compare(sample_text, clean_text) == scorer.compare(clean_text, sample_text)

    def test_paraphrase_is_similar(self, scorer, sample_text):
        variant = sample_text.replace("John", "Jon")
        assert scorer.is_similar(sample_text, variant)

    def test_threshold_from_config(self):
        scorer = SimilarityScorer(Config(_env_file=None, similarity_threshold=0.5))
        assert scorer.threshold == 0.5
        assert scorer.is_similar("abcd", "abce")

    def test_shared_references(self):
        a = MessageSignature(references=frozenset({"QAB123ABC", "ZZZ999ZZZ"}))
        b = MessageSignature(references=frozenset({"QAB123ABC"}))
        assert SimilarityScorer.shared_references(a, b) == frozenset({"QAB123ABC"})
