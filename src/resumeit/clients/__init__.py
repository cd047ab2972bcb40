"""Provider adapters normalizing each wire protocol to prompt -> text."""
