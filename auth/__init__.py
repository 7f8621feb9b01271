"""
Auth package for the Shortener Platform.

Issues and verifies the anonymous per-browser identity carried in the signed
`auth` cookie. The identity is a plain ``uuid.UUID``; the storage layer only
ever sees it as an explicit ``owner`` argument.
"""
