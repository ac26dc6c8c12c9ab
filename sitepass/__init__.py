"""SitePass: contractor and visitor sign-in kiosk for ContractorECR."""

__version__ = "1.0.0"
