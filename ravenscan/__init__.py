"""ravenscan: PhantomRaven npm supply-chain scanner."""

__version__ = "0.1.0"
