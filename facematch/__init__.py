"""Face matching against an Amazon Rekognition collection provisioned with Pulumi."""

__version__ = "0.1.0"
