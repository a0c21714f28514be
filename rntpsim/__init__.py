"""Consumer and sensor applications, event scheduler, TLV coding, settings and logs for transport simulations over wireless named-data networks."""

__version__ = "0.1.0"