"""OTP delivery channels and the provider registry."""
