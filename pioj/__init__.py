"""
Identity and sequencing core of the pioj problem-judging service.

The service issues and verifies user credentials, mediates a one-time e-mail
verification handshake backed by an expiring key store, and allocates the
sequential public identifiers of newly created problems.

Request handling lives in :mod:`pioj.routes` and :mod:`pioj.controllers`;
integrations with the database, the key-value store and the mail server live
in :mod:`pioj.services`. The application is built by
:func:`pioj.factory.create_web_app`.
"""
