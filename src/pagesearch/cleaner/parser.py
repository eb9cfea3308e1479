"""
Parser - HTML to clean text, plus the normalization and tokenization
shared by indexing and querying.
"""
import re
import unicodedata
from typing import FrozenSet, Iterable, List, Optional

from bs4 import BeautifulSoup

# Short English stop list used when no stop-word file is configured
DEFAULT_STOPWORDS = frozenset("""
a an and are as at be but by for from has have in is it its of on or that the
this to was were will with
""".split())

TOKEN_RE = re.compile(r'\w+', re.UNICODE)


def load_stopwords(path: Optional[str]) -> FrozenSet[str]:
    """
    Read a stop-word file, one word per line.

    A missing path falls back to DEFAULT_STOPWORDS; an unreadable file is an
    error, since silently indexing stop words skews every IDF.
    """
    if not path:
        return DEFAULT_STOPWORDS
    with open(path, encoding='utf-8') as f:
        return frozenset(line.strip().lower() for line in f if line.strip())


class Parser:
    """Parses HTML and extracts normalized text."""

    # Tags to remove completely
    NOISE_TAGS = ['script', 'style', 'nav', 'footer', 'header', 'meta', 'noscript', 'aside', 'iframe']

    def __init__(self, stopwords: Optional[Iterable[str]] = None):
        self.stopwords = frozenset(stopwords) if stopwords is not None else DEFAULT_STOPWORDS

    def parse(self, html: str) -> dict:
        """
        Parse HTML and return cleaned metadata.

        Args:
            html: Raw HTML content

        Returns:
            dict with keys:
                - title: str (title as displayed, whitespace collapsed)
                - clean_text: str (body text, whitespace collapsed)
                - doc_len: int (token count for BM25)
        """
        if not html or not html.strip():
            return {'title': '', 'clean_text': '', 'doc_len': 0}

        soup = BeautifulSoup(html, 'lxml')

        # Remove noise tags
        for tag in soup(self.NOISE_TAGS):
            tag.decompose()

        title = self.collapse(self._extract_title(soup))
        clean_text = self.collapse(soup.get_text(separator=' '))

        return {
            'title': title,
            'clean_text': clean_text,
            'doc_len': len(self.tokenize(clean_text))
        }

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """Extract title from <title> or <h1>."""
        if soup.title and soup.title.string:
            return soup.title.string.strip()
        h1 = soup.find('h1')
        if h1:
            return h1.get_text(strip=True)
        return ""

    @staticmethod
    def collapse(text: str) -> str:
        """NFKC-normalize and collapse whitespace, keeping case."""
        if not text:
            return ""
        text = unicodedata.normalize('NFKC', text)
        return re.sub(r'\s+', ' ', text).strip()

    def normalize(self, text: str) -> str:
        """Normalized form used for matching: collapsed and lowercased."""
        return self.collapse(text).lower()

    def tokenize(self, text: str) -> List[str]:
        """Split normalized text into word tokens, dropping stop words."""
        return [t for t in TOKEN_RE.findall(self.normalize(text)) if t not in self.stopwords]
