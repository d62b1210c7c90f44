"""CSS embedded in exported product documents.

The same stylesheet serves the downloadable HTML and the print view; the
``@media print`` block takes over when the document is printed or captured
as PDF.
"""

BASE_CSS = """
body {
  font-family: Georgia, 'Times New Roman', serif;
  font-size: 12pt;
  line-height: 1.7;
  color: #2d2d2d;
  max-width: 780px;
  margin: 0 auto;
  padding: 2em;
}

h1, h2, h3 {
  font-family: 'Helvetica Neue', Arial, sans-serif;
  color: #1a1a1a;
  line-height: 1.3;
}

h2 { font-size: 17pt; margin-top: 1.6em; }
h3 { font-size: 13pt; margin-top: 1.2em; }

p { margin: 0.9em 0; }

ul { margin: 0.9em 0; padding-left: 1.8em; }
li { margin: 0.4em 0; }

strong { color: #111; }
"""

COVER_CSS = """
.cover {
  text-align: center;
  padding: 4em 1em 3em;
  border-bottom: 3px solid #4f46e5;
  margin-bottom: 2em;
}

.cover h1 {
  font-size: 30pt;
  margin: 0 0 0.3em;
}

.cover .tagline {
  font-size: 14pt;
  color: #555;
  font-style: italic;
}

.cover img {
  max-width: 100%;
  max-height: 420px;
  margin-top: 2em;
  border-radius: 6px;
}
"""

TOC_CSS = """
.toc {
  margin: 2em 0 3em;
  padding: 1.2em 1.5em;
  background: #f7f7fb;
  border-radius: 6px;
}

.toc h2 { margin-top: 0; font-size: 15pt; }
.toc ol { list-style: none; padding-left: 0; }
.toc li { margin: 0.3em 0; }
.toc a { color: #333; text-decoration: none; }
"""

CHAPTER_CSS = """
.chapter {
  margin-top: 3em;
}

.chapter > h2 {
  border-bottom: 2px solid #e5e7eb;
  padding-bottom: 0.3em;
}

.chapter .placeholder {
  color: #888;
  font-style: italic;
  border-left: 3px dashed #ccc;
  padding-left: 1em;
}

.key-takeaways {
  margin: 2em 0 1em;
  padding: 1em 1.4em;
  background: #eef2ff;
  border-left: 4px solid #4f46e5;
  border-radius: 4px;
}

.key-takeaways h3 { margin-top: 0; }

.part { margin-top: 3em; }
.module { margin: 1.2em 0 1.2em 1em; }
.module .duration { color: #666; font-size: 10pt; }
"""

BONUS_CSS = """
.bonus {
  margin-top: 3em;
  padding: 1.2em 1.5em;
  border: 1px solid #e5e7eb;
  border-radius: 6px;
}

.bonus h2 { margin-top: 0; }
.bonus .bonus-type { color: #4f46e5; font-size: 10pt; text-transform: uppercase; }
"""

FOOTER_CSS = """
footer {
  margin-top: 4em;
  padding-top: 1em;
  border-top: 1px solid #e5e7eb;
  color: #888;
  font-size: 9pt;
  text-align: center;
}
"""

PRINT_CSS = """
@media print {
  body { max-width: none; padding: 0; font-size: 11pt; }
  .cover { page-break-after: always; border-bottom: none; }
  .toc { page-break-after: always; background: none; }
  .chapter, .part { page-break-before: always; }
  .key-takeaways, .bonus { page-break-inside: avoid; }
  h2, h3 { page-break-after: avoid; }
  footer { display: none; }
}

@page {
  size: A4;
  margin: 2cm;
}
"""


def get_document_styles() -> str:
    """Full stylesheet for export and print."""
    return "\n".join(
        [BASE_CSS, COVER_CSS, TOC_CSS, CHAPTER_CSS, BONUS_CSS, FOOTER_CSS, PRINT_CSS]
    )
