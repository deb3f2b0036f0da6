"""ArcGIS identity federation and tenant provisioning for the admin portal."""
