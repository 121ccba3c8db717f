from __future__ import annotations

# ==============================================================================
# Canvas & Bodies
# ==============================================================================

# Default canvas size in pixels (one panel per regime)
CANVAS_WIDTH = 400
CANVAS_HEIGHT = 300

# Body radii in pixels; the default success threshold is their sum
AGENT_RADIUS = 15.0
GOAL_RADIUS = 20.0

# Air friction applied by the point body every base step (fraction of velocity lost)
AIR_FRICTION = 0.1

# ==============================================================================
# Timing
# ==============================================================================

# Physics timestep: one 60 Hz frame
BASE_DT_S = 1.0 / 60.0

# ==============================================================================
# Buffers
# ==============================================================================

# Capacity of the per-episode position history and the policy reward history
HISTORY_CAPACITY = 10

# Rolling rows kept for the success chart
CHART_CAPACITY = 100

# ==============================================================================
# Reward Regimes
# ==============================================================================

# Gaussian kernel width for the semantic regime (pixel space)
SEMANTIC_SIGMA = 100.0

# Default regime parameters
DEFAULT_SPARSE_THRESHOLD = 30.0
DEFAULT_GAMMA = 0.9
DEFAULT_LEARNING_RATE = 0.1

# Canonical reward for the tick that triggers success
TERMINAL_REWARD = 1.0

# ==============================================================================
# Gradient Overlay
# ==============================================================================

# Affine map for the shaping snapshot: (r + offset) / scale
SHAPING_GRADIENT_OFFSET = 100.0
SHAPING_GRADIENT_SCALE = 200.0

# Constant overlay alpha (semi-transparent)
GRADIENT_ALPHA = 100

# ==============================================================================
# Policy
# ==============================================================================

# Candidate sampling radius in pixels
SAMPLE_RADIUS = 10.0

# momentum = normalize(momentum * decay + direction * (1 - decay))
MOMENTUM_DECAY = 0.7

# final = normalize(direction * (1 - w) + momentum * w)
MOMENTUM_WEIGHT = 0.3

# speed = clamp(distance * gain, min, max)
SPEED_GAIN = 0.015
MIN_SPEED = 1.5
MAX_SPEED = 4.0
