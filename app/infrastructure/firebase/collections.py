"""Firestore collection names.

Document ids: admins and users by principal uid, organizations by tenant
slug, organization_bindings by ArcGIS organization id (value: the slug).
"""

COLLECTION_ADMINS = "admins"
COLLECTION_ORGANIZATIONS = "organizations"
COLLECTION_USERS = "users"
COLLECTION_ORGANIZATION_BINDINGS = "organization_bindings"
