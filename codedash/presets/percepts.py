"""
Built-in Percept catalog.

  hue       240 → 0     blue (calm) → red (hot)
  size      0.2 → 5.0
  border    0   → 3.0
  opacity   1.0 → 0.1   solid → faded
  clarity   0   → 1.0
  weight    0.2 → 5.0
  presence  0   → 1.0
"""
from codedash.model.percept import PerceptDef


hue      = PerceptDef("hue",      range=(240, 0))
size     = PerceptDef("size",     range=(0.2, 5.0))
border   = PerceptDef("border",   range=(0, 3.0))
opacity  = PerceptDef("opacity",  range=(1.0, 0.1))
clarity  = PerceptDef("clarity",  range=(0, 1.0))
weight   = PerceptDef("weight",   range=(0.2, 5.0))
presence = PerceptDef("presence", range=(0, 1.0))


# Salience order: most noticeable channel first.
PERCEPTS = {
    "hue":      hue,
    "size":     size,
    "border":   border,
    "opacity":  opacity,
    "clarity":  clarity,
    "weight":   weight,
    "presence": presence,
}
