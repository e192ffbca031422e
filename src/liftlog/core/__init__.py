"""Pure domain logic: models, formulas, engines and progress statistics."""
