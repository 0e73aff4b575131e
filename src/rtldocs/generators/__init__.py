"""Binary document emitters (PDF, Word) and their shared styles.

Import the emitters from their modules; this package stays import-light
because the layout engine depends on :mod:`.styles`.
"""
