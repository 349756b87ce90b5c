"""HTTP editing surface for the sitebuilder kernel."""
