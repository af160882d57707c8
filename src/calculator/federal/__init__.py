"""
Federal schedules, worksheets and credits feeding Form 1040.

Each module is a pure function of the return (plus any upstream line values it
needs) and returns a frozen result whose lines are TracedValues.
"""
