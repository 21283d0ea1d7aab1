# Demo section used when no stored or server snapshot exists.
# Same shape as the bank records under data/sections/.

DEMO_SECTION = {
    "id": "sec-1",
    "title": "Quant (demo)",
    "items": [
        {
            "id": "q1",
            "prompt": "Simplify (x + 1)^2",
            "modality": "quant",
            "expectedExpression": "(x+1)^2",
            "variables": ["x"],
            "irt": {"a": 1.0, "b": 0.0},
            "answerKey": {"type": "expression", "value": "(x+1)^2", "variables": ["x"]},
        },
        {
            "id": "q2",
            "prompt": "If x = 3, evaluate 2x + 5",
            "modality": "quant",
            "irt": {"a": 1.2, "b": 0.4},
            "answerKey": {"type": "numeric", "value": 11, "tolerance": 0},  # 11
        },
    ],
}
