"""modules: planning, tools, validation and observability for itinerary generation."""
