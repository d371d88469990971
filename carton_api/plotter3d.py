"""
3D visualization helpers for chosen Cartons and their PlacedItems.

Features:
- Carton interior drawn as a translucent cuboid, items as colored cuboids.
- Fragile items drawn in red, item labels on top of each cuboid.
- Previous/Next buttons to navigate between cartons.
- Text summary (carton + unpacked items) inside the window.

Requires:
    matplotlib
"""

from collections import Counter
from typing import Sequence

import matplotlib.pyplot as plt
from matplotlib.widgets import Button
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .models import Carton, PackItem

ITEM_COLORS = [
    "tab:blue", "tab:orange", "tab:green", "tab:purple",
    "tab:brown", "tab:pink", "tab:gray", "tab:olive",
]
FRAGILE_COLOR = "tab:red"


def set_axis_equal(ax):
    """
    Set 3D plot axes to equal scale.
    """
    x_limits = ax.get_xlim3d()
    y_limits = ax.get_ylim3d()
    z_limits = ax.get_zlim3d()

    x_range = abs(x_limits[1] - x_limits[0])
    y_range = abs(y_limits[1] - y_limits[0])
    z_range = abs(z_limits[1] - z_limits[0])

    x_middle = (x_limits[1] + x_limits[0]) / 2
    y_middle = (y_limits[1] + y_limits[0]) / 2
    z_middle = (z_limits[1] + z_limits[0]) / 2

    plot_radius = 0.5 * max([x_range, y_range, z_range])

    ax.set_xlim3d([x_middle - plot_radius, x_middle + plot_radius])
    ax.set_ylim3d([y_middle - plot_radius, y_middle + plot_radius])
    ax.set_zlim3d([z_middle - plot_radius, z_middle + plot_radius])


def _cuboid_faces(origin, size):
    """
    Return the 6 faces (4 vertices each) of an axis-aligned cuboid.
    """
    x0, y0, z0 = origin
    dx, dy, dz = size
    x = [x0, x0 + dx]
    y = [y0, y0 + dy]
    z = [z0, z0 + dz]

    return [
        [(x[0], y[0], z[0]), (x[1], y[0], z[0]), (x[1], y[1], z[0]), (x[0], y[1], z[0])],
        [(x[0], y[0], z[1]), (x[1], y[0], z[1]), (x[1], y[1], z[1]), (x[0], y[1], z[1])],
        [(x[0], y[0], z[0]), (x[1], y[0], z[0]), (x[1], y[0], z[1]), (x[0], y[0], z[1])],
        [(x[0], y[1], z[0]), (x[1], y[1], z[0]), (x[1], y[1], z[1]), (x[0], y[1], z[1])],
        [(x[0], y[0], z[0]), (x[0], y[1], z[0]), (x[0], y[1], z[1]), (x[0], y[0], z[1])],
        [(x[1], y[0], z[0]), (x[1], y[1], z[0]), (x[1], y[1], z[1]), (x[1], y[0], z[1])],
    ]


def draw_carton(ax, carton: Carton):
    """
    Draw one carton and every item placed in it onto a 3D axis.
    Returns the number of item cuboids drawn.
    """
    ct = carton.carton_type
    shell = Poly3DCollection(
        _cuboid_faces((0, 0, 0), ct.dimensions),
        facecolors="lightgray", linewidths=1, edgecolors="k", alpha=0.1,
    )
    ax.add_collection3d(shell)

    for idx, placed in enumerate(carton.placements):
        color = FRAGILE_COLOR if placed.item.fragile else ITEM_COLORS[idx % len(ITEM_COLORS)]
        cuboid = Poly3DCollection(
            _cuboid_faces(placed.position, placed.orientation),
            facecolors=color, linewidths=0.5, edgecolors="k", alpha=0.6,
        )
        ax.add_collection3d(cuboid)

        x0, y0, z0 = placed.position
        l, w, h = placed.orientation
        ax.text(x0 + l / 2.0, y0 + w / 2.0, z0 + h + 0.2, placed.product_id,
                ha="center", va="bottom", fontsize=8, color="black")

    ax.set_xlim(0, ct.length)
    ax.set_ylim(0, ct.width)
    ax.set_zlim(0, ct.height)
    ax.set_xlabel("X (length)")
    ax.set_ylabel("Y (width)")
    ax.set_zlabel("Z (height)")
    set_axis_equal(ax)
    return len(carton.placements)


def carton_summary_text(carton: Carton) -> str:
    """
    Multi-line text summary for a single carton.
    """
    ct = carton.carton_type
    counter = Counter(p.product_id for p in carton.placements)

    lines = [
        f"Carton {ct.label}",
        f"Size: {ct.length}x{ct.width}x{ct.height}",
        f"Fill: {carton.fill_rate * 100:.1f}%  Weight: {carton.items_weight:.2f}/{ct.max_weight:.2f}",
    ]
    if carton.score is not None:
        lines.append(f"Score: {carton.score.total:.1f}")
    lines.append("Items:")
    for product_id, qty in counter.items():
        lines.append(f"  - {product_id}: {qty}")
    return "\n".join(lines)


def unpacked_summary_text(unpacked: Sequence[PackItem]) -> str:
    if not unpacked:
        return "Unpacked items:\n  (none)"
    counter = Counter(it.product_id for it in unpacked)
    lines = ["Unpacked items:"]
    for product_id, qty in counter.items():
        lines.append(f"  - {product_id}: {qty}")
    return "\n".join(lines)


def visualize_cartons_with_buttons(
    cartons: Sequence[Carton],
    unpacked: Sequence[PackItem] = (),
):
    """
    Show a single window with 'Previous' and 'Next' buttons
    to switch between cartons, plus a text summary
    (current carton + unpacked items).
    """
    if not cartons:
        print("No cartons to visualize.")
        return

    state = {"i": 0}

    fig = plt.figure()
    ax = fig.add_subplot(111, projection="3d")

    # keep a reference to the text artist so we can update it
    text_box = {"artist": None}

    def redraw():
        ax.clear()
        carton = cartons[state["i"]]
        draw_carton(ax, carton)
        ax.set_title(f"{carton.carton_type.label} ({state['i'] + 1}/{len(cartons)})")

        summary = carton_summary_text(carton) + "\n\n" + unpacked_summary_text(unpacked)
        if text_box["artist"] is not None:
            text_box["artist"].remove()
        text_box["artist"] = fig.text(
            0.01, 0.01, summary,
            fontsize=8, va="bottom", ha="left",
            bbox=dict(facecolor="white", alpha=0.7, edgecolor="gray"),
        )
        plt.draw()

    class Index:
        def next(self, event):
            state["i"] = (state["i"] + 1) % len(cartons)
            redraw()

        def prev(self, event):
            state["i"] = (state["i"] - 1) % len(cartons)
            redraw()

    callback = Index()

    axprev = fig.add_axes([0.3, 0.02, 0.1, 0.05])
    axnext = fig.add_axes([0.6, 0.02, 0.1, 0.05])

    bprev = Button(axprev, "Previous")
    bprev.on_clicked(callback.prev)

    bnext = Button(axnext, "Next")
    bnext.on_clicked(callback.next)

    redraw()
    plt.show()
