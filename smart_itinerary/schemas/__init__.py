"""schemas: input knowledge models, planner settings and itinerary output."""
