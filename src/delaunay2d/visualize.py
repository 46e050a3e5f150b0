import matplotlib.pyplot as plt


def plot_triangulation_uv(triangles, ring=None, ax=None):
    if ax is None:
        fig, ax = plt.subplots()

    for tri in triangles:
        xs = [s.x for s in tri] + [tri[0].x]
        ys = [s.y for s in tri] + [tri[0].y]
        ax.plot(xs, ys, "-", color="tab:blue", linewidth=0.8)

    if ring is not None and len(ring):
        xs = [p[0] for p in ring] + [ring[0][0]]
        ys = [p[1] for p in ring] + [ring[0][1]]
        ax.plot(xs, ys, "-k", linewidth=1.5)

    ax.set_aspect("equal")
    ax.set_title("Triangulation (UV)")
    return ax
