"""Service integrations: LoginRadius API and the customer store."""
