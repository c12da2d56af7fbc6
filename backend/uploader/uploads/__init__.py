"""Image upload module.

Accepted images (jpg, jpeg, png; up to 5MB) are written to a flat storage
directory under a millisecond-timestamp name. One record per upload is kept
in DuckDB: name, email, public image URL and timestamps. Emails are unique
across records, checked before insert.

Files are never deleted, including when the record insert fails after the
file was written.
"""
