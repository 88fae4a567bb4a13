"""Default algebra curriculum."""

from __future__ import annotations

from functools import lru_cache

from skillforge.topics.graph import Branch, Topic, TopicGraph

BRANCHES: list[Branch] = [
    Branch("foundations", "Foundations", "יסודות", 1),
    Branch("linear", "Linear Equations", "משוואות ליניאריות", 2),
    Branch("polynomials", "Polynomials", "פולינומים", 3),
    Branch("quadratics", "Quadratics", "משוואות ריבועיות", 4),
    Branch("functions", "Functions", "פונקציות", 5),
]

TOPICS: list[Topic] = [
    # --- Foundations ---
    Topic(
        "order-of-operations", "Order of Operations", "סדר פעולות חשבון", "foundations", 1,
        description="Evaluate expressions using the standard order of operations.",
        keywords=("parentheses", "exponents", "multiplication", "addition"),
    ),
    Topic(
        "fractions", "Fractions", "שברים", "foundations", 2,
        description="Add, subtract, multiply and divide fractions.",
        keywords=("numerator", "denominator", "common denominator"),
    ),
    Topic(
        "negative-numbers", "Negative Numbers", "מספרים שליליים", "foundations", 3,
        description="Arithmetic with signed numbers.",
        keywords=("sign", "absolute value"),
    ),
    Topic(
        "basic-equations", "Basic Equations", "משוואות בסיסיות", "foundations", 4,
        description="Solve one-step and two-step equations.",
        prerequisites=("order-of-operations", "negative-numbers"),
        keywords=("solve", "isolate", "inverse operation"),
    ),
    # --- Linear ---
    Topic(
        "linear-equations-one-var", "Linear Equations in One Variable", "משוואות ליניאריות במשתנה אחד", "linear", 1,
        description="Solve linear equations with variables on both sides.",
        prerequisites=("basic-equations",),
        keywords=("distribute", "collect like terms"),
    ),
    Topic(
        "linear-inequalities", "Linear Inequalities", "אי-שוויונות ליניאריים", "linear", 2,
        description="Solve and graph linear inequalities.",
        prerequisites=("linear-equations-one-var",),
        keywords=("inequality", "number line", "flip sign"),
    ),
    Topic(
        "systems-of-equations", "Systems of Linear Equations", "מערכות משוואות", "linear", 3,
        description="Solve two equations in two unknowns.",
        prerequisites=("linear-equations-one-var",),
        keywords=("substitution", "elimination"),
    ),
    # --- Polynomials ---
    Topic(
        "polynomial-operations", "Polynomial Operations", "פעולות בפולינומים", "polynomials", 1,
        description="Add, subtract and multiply polynomials.",
        prerequisites=("basic-equations",),
        keywords=("monomial", "binomial", "like terms"),
    ),
    Topic(
        "factoring-basics", "Factoring Basics", "פירוק לגורמים - יסודות", "polynomials", 2,
        description="Common factors and difference of squares.",
        prerequisites=("polynomial-operations",),
        keywords=("gcf", "difference of squares"),
    ),
    Topic(
        "factoring-trinomials", "Factoring Trinomials", "פירוק טרינומים", "polynomials", 3,
        description="Factor trinomials of the form x² + bx + c.",
        prerequisites=("factoring-basics",),
        keywords=("trinomial", "product and sum"),
    ),
    # --- Quadratics ---
    Topic(
        "quadratic-by-factoring", "Solving Quadratics by Factoring", "פתרון משוואה ריבועית בפירוק", "quadratics", 1,
        description="Solve quadratic equations using the zero-product property.",
        prerequisites=("factoring-trinomials",),
        keywords=("zero product", "roots"),
    ),
    Topic(
        "quadratic-formula", "The Quadratic Formula", "נוסחת השורשים", "quadratics", 2,
        description="Solve any quadratic equation with the quadratic formula.",
        prerequisites=("quadratic-by-factoring",),
        keywords=("discriminant", "roots"),
    ),
    # --- Functions ---
    Topic(
        "function-basics", "Function Basics", "יסודות הפונקציה", "functions", 1,
        description="Evaluate functions and identify domain and range.",
        prerequisites=("linear-equations-one-var",),
        keywords=("domain", "range", "evaluate"),
    ),
    Topic(
        "linear-functions", "Linear Functions", "פונקציה קווית", "functions", 2,
        description="Slope, intercept and graphs of linear functions.",
        prerequisites=("function-basics",),
        keywords=("slope", "intercept"),
    ),
    Topic(
        "quadratic-functions", "Quadratic Functions", "פונקציה ריבועית", "functions", 3,
        description="Vertex, axis of symmetry and graphs of parabolas.",
        prerequisites=("function-basics", "quadratic-formula"),
        keywords=("vertex", "parabola"),
    ),
]


@lru_cache
def get_topic_graph() -> TopicGraph:
    """The process-wide curriculum, built once."""
    return TopicGraph(BRANCHES, TOPICS)
