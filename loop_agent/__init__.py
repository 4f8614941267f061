"""Loop Agent -- scaffolds and publishes a fixed set of template repositories.

Entry points:
    loop_agent.runner    -- the Plan -> Build -> Push loop
    loop_agent.reporter  -- one-shot terminal dashboard
    loop_agent.server    -- HTTP status server and browser dashboard
"""

__version__ = "0.1.0"
